from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ImageRecord(BaseModel):
    """One processed photo as listed in the gallery manifest.

    Both renditions share `filename`; resolve them with
    `settings.full_dir / record.filename` and `settings.thumb_dir / record.filename`.

    Serialized with camelCase keys (`fullWidth`, `capturedAt`, ...) because the
    manifest is read by the gallery frontend. Snake_case names are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    filename: str
    full_width: int
    full_height: int
    thumb_width: int
    thumb_height: int
    captured_at: int = Field(ge=0)  # unix seconds, time of processing

    @field_validator("full_width", "full_height", "thumb_width", "thumb_height")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("width and height must be positive")
        return v

    @property
    def aspect_ratio(self) -> float:
        return self.full_width / self.full_height


class GalleryManifest(BaseModel):
    """Newest-first list of every photo ingested so far."""

    images: list[ImageRecord] = Field(default_factory=list)

    def by_filename(self, filename: str) -> ImageRecord | None:
        return next((r for r in self.images if r.filename == filename), None)

    def by_id(self, record_id: str) -> ImageRecord | None:
        return next((r for r in self.images if r.id == record_id), None)
