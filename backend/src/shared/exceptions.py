from enum import StrEnum


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class GatewayErrorKind(StrEnum):
    LOAD = "load_error"
    SAVE = "save_error"


class GatewayError(AppError):
    """Raised by the persistence gateway; `kind` tells the session what to do with the socket."""

    kind: GatewayErrorKind | None = None

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class LoadError(GatewayError):
    """Raised when no usable initial state can be produced for a document."""

    kind = GatewayErrorKind.LOAD


class SaveError(GatewayError):
    """Raised when a document write failed or was rejected."""

    kind = GatewayErrorKind.SAVE


class UnsupportedFrameError(AppError):
    """Raised when a client sends a frame the collaboration protocol does not use."""

    def __init__(self, message: str = "Unsupported frame"):
        super().__init__(message)
