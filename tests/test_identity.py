import random
import re
from datetime import datetime, timezone

from pipeline.identity import assign_identity, output_filename

_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def test_id_is_seconds_and_token():
    identity = assign_identity("photo.jpg", _NOW, random.Random(1))
    assert re.fullmatch(r"\d+-[0-9a-z]{6}", identity.id)
    assert identity.id.startswith(f"{int(_NOW.timestamp())}-")
    assert identity.captured_at == int(_NOW.timestamp())


def test_filename_always_webp():
    assert output_filename("IMG_0042.HEIC") == "IMG_0042.webp"
    assert output_filename("wide.png") == "wide.webp"
    assert output_filename("holiday.photo.jpeg") == "holiday.photo.webp"


def test_identity_uses_input_stem():
    assert assign_identity("sunset.heic", _NOW, random.Random(1)).filename == "sunset.webp"


def test_same_seed_same_identity():
    a = assign_identity("a.jpg", _NOW, random.Random(42))
    b = assign_identity("a.jpg", _NOW, random.Random(42))
    assert a == b


def test_ids_differ_within_the_same_second():
    rng = random.Random(7)
    ids = {assign_identity(f"{i}.jpg", _NOW, rng).id for i in range(50)}
    assert len(ids) == 50
