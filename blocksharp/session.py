import uuid
import warnings
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from blocksharp.block_schemas import (
    MAX_PROCEDURE_ARGS,
    PROC_ARG,
    PROC_DEF,
    PROCEDURE_NODE_TYPES,
    BlockCatalog,
)
from blocksharp.compiler import CSharpGenerator, find_scope_violations
from blocksharp.document import export_state, import_state, load_document, save_document
from blocksharp.errors import DeclarationError, format_block_diagnostic
from blocksharp.naming import is_banned, strict_name_problem
from blocksharp.program import GlobalVariable, Node, Workspace
from blocksharp.registry import (
    DEFAULT_CLASS_NAME,
    ProcedureArg,
    ProcedureRegistry,
    ProcedureSignature,
)
from blocksharp.typesys import ALL_VAR_TYPES, RETURN_TYPES, VOID

ArgSpec = Union[ProcedureArg, Tuple[str, str]]

# Node types whose field names a variable, keyed by that field.
_VARIABLE_BINDINGS = {
    "VAR": ("var_get", "var_set"),
    "L": (
        "list_add",
        "list_insert",
        "list_remove",
        "list_removeat",
        "list_clear",
        "list_set",
        "list_contains",
        "list_indexof",
        "list_count",
        "list_get",
    ),
}


class EditorSession:
    """
    One edited document: a workspace, its procedure registry and the
    declaration rules that keep them consistent.

    Every declaration is validated before anything is mutated, so a rejected
    call leaves the session unchanged. Call :meth:`generate` (and
    :meth:`catalog` when procedures changed) after each edit.
    """

    def __init__(
        self,
        class_name: str = DEFAULT_CLASS_NAME,
        *,
        generator: Optional[CSharpGenerator] = None,
    ):
        self.workspace = Workspace()
        self.registry = ProcedureRegistry(class_name)
        self.generator = generator or CSharpGenerator()

    # Variables

    def declare_variable(self, name: str, var_type: str) -> GlobalVariable:
        self._check_declared_name(name)
        if var_type not in ALL_VAR_TYPES:
            raise DeclarationError(
                f"Unknown variable type '{var_type}'.", reason="unknown_type", name=name
            )
        return self.workspace.add_variable(name, var_type)

    def remove_variable(self, name: str) -> int:
        """Remove a variable and every block bound to it; returns removed count."""
        if self.workspace.variable(name) is None:
            raise DeclarationError(
                f"Unknown variable '{name}'.", reason="unknown_variable", name=name
            )
        removed = self.workspace.purge(lambda node: _binds_variable(node, name))
        self.workspace.remove_variable(name)
        if removed:
            warnings.warn(
                format_block_diagnostic(
                    f"Removed {removed} block(s) bound to variable '{name}'."
                ),
                stacklevel=2,
            )
        return removed

    # Procedures

    def declare_procedure(
        self,
        name: str,
        return_type: str = VOID,
        args: Sequence[ArgSpec] = (),
    ) -> ProcedureSignature:
        """Register a procedure and place its definition and argument blocks."""
        self._check_declared_name(name)
        if return_type not in RETURN_TYPES:
            raise DeclarationError(
                f"Unknown return type '{return_type}'.", reason="unknown_type", name=name
            )
        parsed_args = self._check_args(args)

        signature = ProcedureSignature(
            id=self._fresh_procedure_id(),
            name=name,
            return_type=return_type,
            args=parsed_args,
        )
        self.registry.add(signature)
        self.workspace.new_node(PROC_DEF, fields={"PROC": signature.id})
        for index in range(len(parsed_args)):
            self.workspace.new_node(PROC_ARG, fields={"PROC": signature.id, "INDEX": index})
        return signature

    def remove_procedure(self, procedure_id: str) -> int:
        """Remove a procedure with its definition, call and argument blocks."""
        signature = self.registry.get(procedure_id)
        if signature is None:
            raise DeclarationError(
                f"Unknown procedure id '{procedure_id}'.",
                reason="unknown_procedure",
                name=procedure_id,
            )
        removed = self.workspace.purge(
            lambda node: node.type in PROCEDURE_NODE_TYPES
            and node.field("PROC") == procedure_id
        )
        self.registry.remove(procedure_id)
        if removed:
            warnings.warn(
                format_block_diagnostic(
                    f"Removed {removed} block(s) of procedure '{signature.name}'."
                ),
                stacklevel=2,
            )
        return removed

    def set_class_name(self, name: str) -> None:
        if name == "":
            self.registry.set_class_name(DEFAULT_CLASS_NAME)
            return
        problem = strict_name_problem(name)
        if problem is not None:
            raise DeclarationError(
                f"Invalid class name {name!r}: {problem}.", reason=problem, name=name
            )
        self.registry.set_class_name(name)

    # Output

    def generate(self) -> str:
        return self.generator.generate(self.workspace, self.registry)

    def scope_violations(self) -> List[int]:
        return find_scope_violations(self.generate())

    def catalog(self) -> List[Dict[str, Any]]:
        return BlockCatalog(self.registry).describe()

    # Persistence

    def export_state(self) -> Dict[str, Any]:
        return export_state(self.workspace, self.registry)

    def import_state(self, obj: Any) -> None:
        self.workspace, self.registry = import_state(obj)

    def save(self, path) -> Path:
        return save_document(path, self.workspace, self.registry)

    def load(self, path) -> None:
        self.workspace, self.registry = load_document(path)

    # Validation

    def _check_declared_name(self, name: str) -> None:
        problem = strict_name_problem(name)
        if problem is not None:
            raise DeclarationError(f"Invalid name {name!r}: {problem}.", reason=problem, name=name)
        if self.workspace.variable(name) is not None:
            raise DeclarationError(
                f"Name '{name}' is already a variable.", reason="var_collision", name=name
            )
        if self.registry.by_name(name) is not None:
            raise DeclarationError(
                f"Name '{name}' is already a procedure.", reason="proc_collision", name=name
            )
        if is_banned(name):
            raise DeclarationError(f"Name '{name}' is reserved.", reason="banned", name=name)

    def _check_args(self, args: Iterable[ArgSpec]) -> Tuple[ProcedureArg, ...]:
        parsed = tuple(
            arg if isinstance(arg, ProcedureArg) else ProcedureArg(*arg) for arg in args
        )
        if len(parsed) > MAX_PROCEDURE_ARGS:
            raise DeclarationError(
                f"Procedures take at most {MAX_PROCEDURE_ARGS} arguments.",
                reason="too_many_args",
            )

        seen = set()
        for arg in parsed:
            problem = strict_name_problem(arg.name)
            if problem is not None:
                raise DeclarationError(
                    f"Invalid argument name {arg.name!r}: {problem}.",
                    reason=problem,
                    name=arg.name,
                )
            if is_banned(arg.name):
                raise DeclarationError(
                    f"Argument name '{arg.name}' is reserved.", reason="banned", name=arg.name
                )
            if arg.name in seen:
                raise DeclarationError(
                    f"Duplicate argument name '{arg.name}'.",
                    reason="duplicate_argument",
                    name=arg.name,
                )
            if arg.type not in ALL_VAR_TYPES:
                raise DeclarationError(
                    f"Unknown argument type '{arg.type}'.", reason="unknown_type", name=arg.name
                )
            seen.add(arg.name)
        return parsed

    def _fresh_procedure_id(self) -> str:
        while True:
            candidate = uuid.uuid4().hex[:8]
            if not self.registry.has(candidate):
                return candidate


def _binds_variable(node: Node, name: str) -> bool:
    for field_name, node_types in _VARIABLE_BINDINGS.items():
        if node.type in node_types and node.field(field_name) == name:
            return True
    return False
