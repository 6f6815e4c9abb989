"""Exceptions raised by the ingest pipeline.

`FileProcessingError` subclasses are recovered per file by the orchestrator:
the file is logged, left in the inbox and the batch carries on. Every other
`IngestError` aborts the run.
"""


class IngestError(Exception):
    """Base class for all ingest failures."""


class FileProcessingError(IngestError):
    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.reason = message


class DecodeError(FileProcessingError):
    """Input could not be read as any supported image encoding."""


class EncodeError(FileProcessingError):
    """Writing an output rendition failed."""


class FilenameCollisionError(FileProcessingError):
    """The derived output filename is already taken."""


class ManifestReadError(IngestError):
    """Existing manifest is missing or unparseable."""


class ManifestWriteError(IngestError):
    pass


class OutputDirectoryError(IngestError):
    pass


class InboxEnumerationError(IngestError):
    pass
