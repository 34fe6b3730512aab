import contextvars
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional


_CURRENT_DOCUMENT_PATH: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "blocksharp_current_document_path", default=None
)
_CURRENT_BLOCK: contextvars.ContextVar[Optional[Mapping[str, Any]]] = contextvars.ContextVar(
    "blocksharp_current_block", default=None
)


def _describe_block(block: Mapping[str, Any]) -> Optional[str]:
    block_id = block.get("id")
    if block_id is None:
        return None
    block_type = block.get("type")
    if isinstance(block_type, str) and block_type:
        return f"{block_id} ({block_type})"
    return str(block_id)


def _format_with_context(
    message: str,
    *,
    path: Optional[str] = None,
    block: Optional[Mapping[str, Any]] = None,
) -> str:
    path = path if path is not None else _CURRENT_DOCUMENT_PATH.get()
    block = block if block is not None else _CURRENT_BLOCK.get()

    details = []
    if path:
        details.append(f"Document: {path}")
    if isinstance(block, Mapping):
        described = _describe_block(block)
        if described:
            details.append(f"Block: {described}")
    if not details:
        return message
    return f"{message}\n" + "\n".join(details)


def format_block_diagnostic(
    message: str, *, block: Optional[Mapping[str, Any]] = None
) -> str:
    """Attach best-effort document/block context to a warning string."""
    return _format_with_context(message, block=block)


@contextmanager
def document_path_context(path: str) -> Iterator[None]:
    token = _CURRENT_DOCUMENT_PATH.set(path)
    try:
        yield
    finally:
        _CURRENT_DOCUMENT_PATH.reset(token)


@contextmanager
def block_context(block: Optional[Mapping[str, Any]]) -> Iterator[None]:
    token = _CURRENT_BLOCK.set(block)
    try:
        yield
    finally:
        _CURRENT_BLOCK.reset(token)


class BlockSharpError(Exception):
    """Base blocksharp error."""


class DeclarationError(BlockSharpError):
    """Raised when a variable/procedure/class declaration is rejected.

    ``reason`` is a short machine-readable code (``"banned"``,
    ``"var_collision"``...) so editors can localize the message.
    """

    def __init__(self, message: str, *, reason: str, name: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.name = name


class DocumentError(BlockSharpError):
    """Raised when a persisted document cannot be loaded."""

    def __init__(self, message: str, *, block: Optional[Mapping[str, Any]] = None):
        super().__init__(_format_with_context(message, block=block))
