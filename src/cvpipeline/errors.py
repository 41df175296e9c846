"""Exception types shared by adapters and the parse pipeline."""

from __future__ import annotations


class ExtractionError(Exception):
    """Raised by an adapter when its decoder fails on the given input."""

    def __init__(self, adapter_name: str, cause: BaseException | str):
        message = str(cause) if str(cause) else type(cause).__name__
        super().__init__(message)
        self.adapter_name = adapter_name
        self.cause = cause

    @property
    def message(self) -> str:
        return self.args[0]


class RemoteDelegationError(ExtractionError):
    """Raised when the remote parsing service call fails."""

    def __init__(self, cause: BaseException | str, *, adapter_name: str = "remote"):
        super().__init__(adapter_name, cause)
