"""Public Python API for blocksharp.

The package exposes a small stable surface: an editing session that owns a
block program and its procedure registry, the C# generator, and the document
save/load helpers. Block types live in ``blocksharp.block_schemas``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from blocksharp.block_schemas import BlockCatalog
from blocksharp.compiler import CSharpGenerator, find_scope_violations, generate_csharp
from blocksharp.document import (
    dumps_state,
    export_script,
    export_state,
    import_state,
    load_document,
    loads_state,
    save_document,
)
from blocksharp.errors import BlockSharpError, DeclarationError, DocumentError
from blocksharp.program import GlobalVariable, Node, Workspace
from blocksharp.registry import ProcedureArg, ProcedureRegistry, ProcedureSignature
from blocksharp.session import EditorSession

try:
    __version__: str = version("blocksharp")
except PackageNotFoundError:  # pragma: no cover - editable local fallback
    __version__ = "0.1.0"


def about(*, print_output: bool = True) -> str:
    """Return and optionally print the generator's semantic contract.

    Args:
        print_output: Whether to print the returned summary.

    Returns:
        Human-readable semantic summary string.

    Side Effects:
        Prints to stdout when ``print_output`` is True.

    Example:
        >>> from blocksharp import about
        >>> text = about(print_output=False)
        >>> "MonoBehaviour" in text
        True
    """
    text = (
        f"blocksharp {__version__}\n"
        "Output: one Unity MonoBehaviour class per document, fields first, then procedures, then event handlers.\n"
        "Empty sockets: filled with the expected type's default literal (0, 0f, false, \"\", Vector3.zero, null...).\n"
        "Scope: collision/other and procedure arguments are only valid inside their own handler or procedure.\n"
        "Out-of-scope statements: kept as comments after a '// scope-out: generated as comment' marker.\n"
        "Procedures: a non-void procedure without any return gets a default-value return appended."
    )
    if print_output:
        print(text)
    return text


__all__ = [
    "__version__",
    "about",
    "BlockCatalog",
    "BlockSharpError",
    "CSharpGenerator",
    "DeclarationError",
    "DocumentError",
    "EditorSession",
    "GlobalVariable",
    "Node",
    "ProcedureArg",
    "ProcedureRegistry",
    "ProcedureSignature",
    "Workspace",
    "dumps_state",
    "export_script",
    "export_state",
    "find_scope_violations",
    "generate_csharp",
    "import_state",
    "load_document",
    "loads_state",
    "save_document",
]
