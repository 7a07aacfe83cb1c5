"""Exception hierarchy shared by the client and the analysis server."""


class RoomCheckError(Exception):
    """Base class for all project errors."""


class ImageProcessingError(RoomCheckError):
    """Resize or re-encode of a picked image failed."""


class AnalysisRequestError(RoomCheckError):
    """Client-side analysis request failed; the message is shown to the user."""


class PayloadTooLargeError(RoomCheckError):
    def __init__(self, limit: int) -> None:
        super().__init__(limit)
        self.limit = limit


class AnalysisError(RoomCheckError):
    """Server-side failure surfaced to the caller as a 500."""


class GenerationError(AnalysisError):
    """The model provider call failed or returned output that does not validate."""


class PersistenceError(AnalysisError):
    """The analysis record could not be appended to the store."""


class BadRequestError(RoomCheckError):
    """Request framing is malformed before the body can be validated."""
