import random
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from pipeline.encoder import OUTPUT_EXTENSION

_TOKEN_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_TOKEN_LENGTH = 6


class Identity(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str  # <unix-seconds>-<token>, e.g. 1760889600-k3x9qa
    filename: str
    captured_at: int


def output_filename(source_name: str) -> str:
    """`IMG_0042.HEIC` -> `IMG_0042.webp`."""
    return f"{Path(source_name).stem}{OUTPUT_EXTENSION}"


def assign_identity(source_name: str, now: datetime, rng: random.Random) -> Identity:
    """Build the record id and output filename for one processed file.

    Uniqueness of `id` within a second rests on the random token; the
    filesystem is not consulted here.
    """
    captured_at = int(now.timestamp())
    token = "".join(rng.choice(_TOKEN_ALPHABET) for _ in range(_TOKEN_LENGTH))
    return Identity(
        id=f"{captured_at}-{token}",
        filename=output_filename(source_name),
        captured_at=captured_at,
    )
