from __future__ import annotations


class SwapError(Exception):
    """Base class for every failure that aborts a swap run.

    `stage` names the pipeline step that failed and `leg` the 1-based leg
    index, when the failure belongs to a single leg.
    """

    def __init__(self, message: str, *, stage: str | None = None, leg: int | None = None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.leg = leg

    def __str__(self) -> str:
        prefix = self.stage or ""
        if self.leg is not None:
            prefix = f"{prefix} (leg {self.leg})".strip()
        return f"{prefix}: {self.message}" if prefix else self.message


class ConfigurationError(SwapError):
    pass


class TransportError(SwapError):
    pass


class ProtocolError(SwapError):
    def __init__(self, message: str, *, status_code: int | None = None, **kw):
        super().__init__(message, **kw)
        self.status_code = status_code


class DecodeError(SwapError):
    pass


class SigningError(SwapError):
    pass


class SubmissionError(SwapError):
    pass


class ConfirmationError(SwapError):
    def __init__(self, message: str, *, status: str = "failed", signature: str | None = None, **kw):
        super().__init__(message, **kw)
        self.status = status
        self.signature = signature
