from typing import List, Optional, Sequence

from blocksharp.block_schemas import PROC_DEF, BlockCatalog
from blocksharp.program import Workspace
from blocksharp.registry import DEFAULT_CLASS_NAME, ProcedureRegistry, ProcedureSignature
from blocksharp.scope import EventScope, GenerationContext, ProcedureScope
from blocksharp.typesys import default_literal, is_list_type, to_cs_type

from .constants import BASE_CLASS, EVENT_HANDLERS, INDENT, USING_DIRECTIVES, EventHandlerSpec
from .expressions import ExpressionCompiler
from .helpers import indent_lines
from .statements import StatementCompiler


class CSharpGenerator:
    def __init__(
        self,
        *,
        indent: str = INDENT,
        base_class: str = BASE_CLASS,
        using_directives: Sequence[str] = USING_DIRECTIVES,
        default_class_name: str = DEFAULT_CLASS_NAME,
    ):
        """Create a generator producing one MonoBehaviour source file per call."""
        self.indent = indent
        self.base_class = base_class
        self.using_directives = tuple(using_directives)
        self.default_class_name = default_class_name

    def generate(self, workspace: Workspace, registry: ProcedureRegistry) -> str:
        """Compile a workspace snapshot against its registry into C# source.

        Generation is total: empty sockets, unknown blocks and out-of-scope
        references all degrade into default literals, placeholders or
        commented-out statements instead of raising.
        """
        catalog = BlockCatalog(registry)
        statements = StatementCompiler(
            workspace,
            catalog,
            ExpressionCompiler(workspace, catalog),
            indent=self.indent,
        )

        members: List[str] = self._emit_fields(workspace)
        for signature in registry.procedures():
            members.extend(self._emit_procedure(workspace, statements, signature))
        for handler in EVENT_HANDLERS:
            members.extend(self._emit_event(workspace, statements, handler))

        class_name = registry.class_name or self.default_class_name
        lines = [f"using {namespace};" for namespace in self.using_directives]
        lines.append("")
        lines.append(f"public class {class_name} : {self.base_class} {{")
        lines.extend(indent_lines(members, 1, self.indent))
        lines.append("}")
        lines.append("")
        return "\n".join(lines)

    def _emit_fields(self, workspace: Workspace) -> List[str]:
        lines = []
        for variable in workspace.variables:
            cs_type = to_cs_type(variable.type)
            if is_list_type(variable.type):
                lines.append(f"public {cs_type} {variable.name} = new {cs_type}();")
            else:
                lines.append(f"public {cs_type} {variable.name};")
        return lines

    def _emit_procedure(
        self,
        workspace: Workspace,
        statements: StatementCompiler,
        signature: ProcedureSignature,
    ) -> List[str]:
        definition = next(
            (
                node
                for node in workspace.top_nodes(PROC_DEF)
                if node.field("PROC") == signature.id
            ),
            None,
        )
        if definition is None:
            return []

        ctx = GenerationContext(ProcedureScope(signature.id))
        body = statements.compile_chain(workspace.statement_target(definition, "DO"), ctx)
        if signature.returns_value and not any(
            line.strip().startswith("return ") for line in body
        ):
            body.append(f"return {default_literal(signature.return_type)};")

        params = ", ".join(f"{to_cs_type(arg.type)} {arg.name}" for arg in signature.args)
        header = f"public {to_cs_type(signature.return_type)} {signature.name}({params})"
        return self._emit_method(header, body)

    def _emit_event(
        self,
        workspace: Workspace,
        statements: StatementCompiler,
        handler: EventHandlerSpec,
    ) -> List[str]:
        roots = workspace.top_nodes(handler.block_type)
        if not roots and not handler.always_emit:
            return []

        body: List[str] = []
        for root in roots:
            ctx = GenerationContext(EventScope(handler.param))
            body.extend(statements.compile_chain(workspace.next_node(root), ctx))
        return self._emit_method(f"void {handler.method}({handler.parameter})", body)

    def _emit_method(self, header: str, body: List[str]) -> List[str]:
        return ["", f"{header} {{", *indent_lines(body, 1, self.indent), "}"]


def generate_csharp(
    workspace: Workspace,
    registry: ProcedureRegistry,
    generator: Optional[CSharpGenerator] = None,
) -> str:
    return (generator or CSharpGenerator()).generate(workspace, registry)
