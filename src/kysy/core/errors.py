"""Error taxonomy for a single ask invocation."""

from __future__ import annotations

from pathlib import Path


class KysyError(Exception):
    """Base class for every failure surfaced to the operator."""


# ---------------------------------------------------------------------------
# Persisted state
# ---------------------------------------------------------------------------


class CorruptState(KysyError):
    """Raised when the persisted context is not a JSON array of integers."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Unable to parse context file {path}: {reason}")
        self.path = path


class PersistenceError(KysyError):
    """Raised when a state or output file cannot be created, read or written."""


class ContextLocked(PersistenceError):
    """Raised when another invocation holds the context lock."""


class InputFileError(KysyError):
    """Raised when the file passed to ``--file`` cannot be read."""


# ---------------------------------------------------------------------------
# Inference exchange
# ---------------------------------------------------------------------------


class TransportError(KysyError):
    """Raised when the inference server cannot be reached or rejects the request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InferenceTimeout(TransportError):
    """Raised when the inference server does not answer within the timeout."""


class ProtocolError(KysyError):
    """Raised when the response body is not the expected envelope shape."""


class MalformedModelOutput(KysyError):
    """Raised when the model's answer text does not match the artifact schema.

    The raw text is kept on ``raw_text`` so the operator can inspect what the
    model actually produced.
    """

    def __init__(self, reason: str, raw_text: str) -> None:
        super().__init__(f"Model responded with malformed JSON: {reason}")
        self.raw_text = raw_text
