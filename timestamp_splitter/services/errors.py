"""Custom exceptions for pipeline and service operations."""


class PipelineError(Exception):
    """Base class for errors that abort a whole split run."""


class DecodeError(PipelineError):
    """Raised when the source audio cannot be decoded."""


class SegmentationError(PipelineError):
    """Raised when a segment maps to an empty or negative sample range."""


class EncoderError(PipelineError):
    """Raised when a segment cannot be encoded into its container."""


class ArchiveError(PipelineError):
    """Raised when building the archive or writing output files fails."""


class ValidationFailedError(PipelineError):
    """Raised when a batch has validation issues and nothing is exported."""

    def __init__(self, issues):
        self.issues = list(issues)
        super().__init__(f"{len(self.issues)} validation issue(s); no segments exported")
