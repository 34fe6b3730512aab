import json
import warnings
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from blocksharp.block_schemas import PROCEDURE_NODE_TYPES
from blocksharp.compiler import CSharpGenerator
from blocksharp.errors import (
    DocumentError,
    block_context,
    document_path_context,
    format_block_diagnostic,
)
from blocksharp.program import Workspace
from blocksharp.registry import DEFAULT_CLASS_NAME, ProcedureRegistry, ProcedureSignature

DOCUMENT_VERSION = 1


def export_state(workspace: Workspace, registry: ProcedureRegistry) -> Dict[str, Any]:
    """Serialize registry metadata and the block tree into one document."""
    return {
        "version": DOCUMENT_VERSION,
        "className": registry.class_name,
        "procedures": [signature.to_dict() for signature in registry.procedures()],
        "workspace": workspace.to_dict(),
    }


def import_state(obj: Any) -> Tuple[Workspace, ProcedureRegistry]:
    """Rebuild a workspace and its registry from :func:`export_state` output.

    The registry is restored first and the tree is checked against it, so a
    procedure node can never outlive the procedure it refers to.
    """
    if not isinstance(obj, dict):
        raise DocumentError("Invalid document: expected a JSON object.")

    version = obj.get("version", DOCUMENT_VERSION)
    if version != DOCUMENT_VERSION:
        warnings.warn(
            format_block_diagnostic(
                f"Document version {version!r} is not {DOCUMENT_VERSION}; loading anyway."
            ),
            stacklevel=2,
        )

    registry = ProcedureRegistry(str(obj.get("className") or DEFAULT_CLASS_NAME))
    for entry in _as_list(obj.get("procedures"), "procedures"):
        if not isinstance(entry, dict) or not entry.get("id"):
            warnings.warn(
                format_block_diagnostic("Skipping procedure entry without an id."),
                stacklevel=2,
            )
            continue
        try:
            registry.add(ProcedureSignature.from_dict(entry))
        except (KeyError, TypeError) as exc:
            raise DocumentError(f"Invalid procedure '{entry['id']}': {exc}") from exc

    payload = obj.get("workspace")
    if payload is None:
        return Workspace(), registry
    if not isinstance(payload, dict):
        raise DocumentError("Invalid document: 'workspace' must be an object.")

    for block in _as_list(payload.get("blocks"), "workspace.blocks"):
        if not isinstance(block, dict):
            raise DocumentError("Invalid document: every block must be an object.")
        with block_context(block):
            _check_block_sections(block)
            _check_procedure_reference(block, registry)

    try:
        workspace = Workspace.from_dict(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise DocumentError(f"Invalid workspace: {exc}") from exc
    return workspace, registry


def dumps_state(workspace: Workspace, registry: ProcedureRegistry) -> str:
    return json.dumps(export_state(workspace, registry), indent=2)


def loads_state(text: str) -> Tuple[Workspace, ProcedureRegistry]:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentError(f"Invalid JSON: {exc}") from exc
    return import_state(obj)


def save_document(path, workspace: Workspace, registry: ProcedureRegistry) -> Path:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(dumps_state(workspace, registry) + "\n", encoding="utf-8")
    return out_path


def load_document(path) -> Tuple[Workspace, ProcedureRegistry]:
    doc_path = Path(path)
    with document_path_context(str(doc_path)):
        return loads_state(doc_path.read_text(encoding="utf-8"))


def export_script(
    document_path,
    output_dir,
    class_name: Optional[str] = None,
    *,
    generator: Optional[CSharpGenerator] = None,
) -> Path:
    """Compile a saved document and write ``<ClassName>.cs`` to ``output_dir``."""
    workspace, registry = load_document(document_path)
    if class_name:
        registry.set_class_name(class_name)

    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    script_path = out_dir / f"{registry.class_name or DEFAULT_CLASS_NAME}.cs"
    source = (generator or CSharpGenerator()).generate(workspace, registry)
    script_path.write_text(source, encoding="utf-8")
    return script_path


def _as_list(value: Any, label: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DocumentError(f"Invalid document: '{label}' must be a list.")
    return value


def _check_block_sections(block: Dict[str, Any]) -> None:
    for key in ("fields", "inputs", "statements"):
        value = block.get(key)
        if value is not None and not isinstance(value, dict):
            raise DocumentError(f"Invalid document: block '{key}' must be an object.")


def _check_procedure_reference(block: Dict[str, Any], registry: ProcedureRegistry) -> None:
    if block.get("type") not in PROCEDURE_NODE_TYPES:
        return
    fields = block.get("fields") or {}
    procedure_id = fields.get("PROC") if isinstance(fields, dict) else None
    if not registry.has(str(procedure_id)):
        raise DocumentError(f"Block references unknown procedure '{procedure_id}'.")
