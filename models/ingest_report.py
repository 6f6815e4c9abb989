from pydantic import BaseModel, Field

from models.manifest import ImageRecord


class ProcessedFile(BaseModel):
    """An inbox file that made it through the whole pipeline."""

    source: str  # inbox filename, e.g. IMG_0042.HEIC
    record: ImageRecord
    source_bytes: int = Field(ge=0)
    full_bytes: int = Field(ge=0)

    @property
    def size_reduction(self) -> float:
        """Fraction of the source size saved by the full rendition (negative if it grew)."""
        if self.source_bytes == 0:
            return 0.0
        return 1.0 - self.full_bytes / self.source_bytes


class FileFailure(BaseModel):
    source: str
    reason: str


class IngestReport(BaseModel):
    """Outcome of one ingest batch. Returned by `pipeline.ingest.run`."""

    processed: list[ProcessedFile] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)  # unsupported extensions
    failed: list[FileFailure] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)  # inbox entries deleted after the merge
    manifest_written: bool = False
    manifest_size: int = 0

    @property
    def new_records(self) -> list[ImageRecord]:
        return [p.record for p in self.processed]
