from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from blocksharp.block_schemas import (
    PROC_ARG,
    PROC_CALL_STMT,
    PROC_CALL_VAL,
    BlockCatalog,
    BlockKind,
)
from blocksharp.program import Node, Workspace
from blocksharp.scope import GenerationContext
from blocksharp.typesys import COMPONENT_TYPES, VOID, default_literal

from .constants import FORCE_MODES, INDENT, REPEAT_VAR
from .expressions import ExpressionCompiler, choice
from .helpers import comment_out, cs_string_literal, indent_lines, paren


@dataclass
class StmtResult:
    lines: List[str] = field(default_factory=list)
    illegal: bool = False


# block type -> (receiver socket, property, value socket)
PROPERTY_SETTERS: Dict[str, Tuple[str, str, str]] = {
    "tr_set_pos": ("TR", "position", "V"),
    "tr_set_lpos": ("TR", "localPosition", "V"),
    "tr_set_rot": ("TR", "rotation", "Q"),
    "tr_set_lrot": ("TR", "localRotation", "Q"),
    "tr_set_euler": ("TR", "eulerAngles", "E"),
    "tr_set_leuler": ("TR", "localEulerAngles", "E"),
    "rb_set_useGravity": ("RB", "useGravity", "B"),
    "rb_set_isKinematic": ("RB", "isKinematic", "B"),
    "rb_set_mass": ("RB", "mass", "M"),
    "rb_set_vel": ("RB", "velocity", "V"),
    "rb_set_angvel": ("RB", "angularVelocity", "V"),
    "anim_set_speed": ("A", "speed", "V"),
    "aud_set_volume": ("S", "volume", "V"),
    "aud_set_pitch": ("S", "pitch", "V"),
    "aud_set_loop": ("S", "loop", "B"),
    "tmp_set_text": ("T", "text", "S"),
    "img_set_sprite": ("I", "sprite", "S"),
}

# block type -> (receiver socket, method, argument sockets)
METHOD_CALLS: Dict[str, Tuple[str, str, Tuple[str, ...]]] = {
    "tr_translate": ("TR", "Translate", ("D",)),
    "tr_rotate": ("TR", "Rotate", ("E",)),
    "tr_lookat_tr": ("TR", "LookAt", ("T",)),
    "tr_lookat_v3": ("TR", "LookAt", ("P",)),
    "rb_movepos": ("RB", "MovePosition", ("P",)),
    "rb_moverot": ("RB", "MoveRotation", ("Q",)),
    "aud_play": ("S", "Play", ()),
    "aud_stop": ("S", "Stop", ()),
    "aud_pause": ("S", "Pause", ()),
    "aud_playoneshot": ("S", "PlayOneShot", ("C",)),
}

# block type -> (receiver socket, method, force socket)
FORCE_CALLS: Dict[str, Tuple[str, str, str]] = {
    "rb_addforce": ("RB", "AddForce", "F"),
    "rb_addtorque": ("RB", "AddTorque", "TQ"),
}

# block type -> (method, key field, value socket)
ANIMATOR_CALLS: Dict[str, Tuple[str, str, Optional[str]]] = {
    "anim_setFloat": ("SetFloat", "K", "V"),
    "anim_setBool": ("SetBool", "K", "V"),
    "anim_setTrigger": ("SetTrigger", "K", None),
    "anim_resetTrigger": ("ResetTrigger", "K", None),
    "anim_play": ("Play", "S", None),
}

# block type -> (callee, argument sockets)
STATIC_STATEMENTS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "scene_load": ("SceneManager.LoadScene", ("N",)),
    "dbg_log": ("Debug.Log", ("S",)),
    "unity_destroy": ("Destroy", ("O", "T")),
}

# block type -> (method, argument sockets)
LIST_CALLS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "list_add": ("Add", ("V",)),
    "list_insert": ("Insert", ("I", "V")),
    "list_remove": ("Remove", ("V",)),
    "list_removeat": ("RemoveAt", ("I",)),
    "list_clear": ("Clear", ()),
}


def repeat_variable(depth: int) -> str:
    return REPEAT_VAR if depth == 0 else f"{REPEAT_VAR}{depth}"


class StatementCompiler:
    """Translates statement nodes and statement chains into C# lines."""

    def __init__(
        self,
        workspace: Workspace,
        catalog: BlockCatalog,
        expressions: Optional[ExpressionCompiler] = None,
        *,
        indent: str = INDENT,
    ):
        self.workspace = workspace
        self.catalog = catalog
        self.expressions = expressions or ExpressionCompiler(workspace, catalog)
        self.indent = indent
        self._handlers: Dict[str, Callable[[Node, GenerationContext], List[str]]] = {
            "var_set": self._var_set,
            "ctrl_if": self._if,
            "ctrl_if_else": self._if,
            "ctrl_repeat": self._repeat,
            "ctrl_while": self._while,
            "ctrl_break": self._break,
            "ctrl_return": self._return,
            "physics_raycast": self._raycast,
            "go_getcomponent": self._get_component,
            "unity_instantiate": self._instantiate,
            "dbg_ray": self._debug_ray,
            "btn_addlistener": self._add_listener,
            "list_set": self._list_set,
            PROC_CALL_STMT: self._procedure_call,
        }

    def compile_chain(self, head: Optional[Node], ctx: GenerationContext) -> List[str]:
        """Compile every statement from ``head`` along its ``next`` links.

        An illegal statement is kept as commented-out text; its siblings are
        compiled independently.
        """
        lines: List[str] = []
        for node in self.workspace.iter_chain(head):
            result = self.compile(node, ctx)
            if result.illegal or ctx.illegal:
                lines.extend(comment_out(result.lines))
            else:
                lines.extend(result.lines)
        return lines

    def compile(self, node: Node, ctx: GenerationContext) -> StmtResult:
        local = ctx.for_statement()
        handler = self._handlers.get(node.type)
        if handler is not None:
            lines = handler(node, local)
        elif node.type in PROPERTY_SETTERS:
            lines = self._property_setter(node, local)
        elif node.type in METHOD_CALLS:
            receiver, method, sockets = METHOD_CALLS[node.type]
            lines = [self._method_call(node, receiver, method, sockets, local) + ";"]
        elif node.type in FORCE_CALLS:
            lines = self._force_call(node, local)
        elif node.type in ANIMATOR_CALLS:
            lines = self._animator_call(node, local)
        elif node.type in STATIC_STATEMENTS:
            callee, sockets = STATIC_STATEMENTS[node.type]
            lines = [self.expressions.call(callee, node, sockets, local).code + ";"]
        elif node.type in LIST_CALLS:
            method, sockets = LIST_CALLS[node.type]
            target = f"{self.expressions.list_name(node)}.{method}"
            lines = [self.expressions.call(target, node, sockets, local).code + ";"]
        elif self._is_value_node(node):
            lines = [self.expressions.compile(node, local).code + ";"]
        else:
            lines = [f"/* unknown statement: {node.type} */"]
        return StmtResult(lines, local.illegal)

    def body(self, node: Node, socket: str, ctx: GenerationContext) -> List[str]:
        """Indented lines of the chain held in a body socket."""
        head = self.workspace.statement_target(node, socket)
        return indent_lines(self.compile_chain(head, ctx), 1, self.indent)

    def _is_value_node(self, node: Node) -> bool:
        if node.type in (PROC_CALL_VAL, PROC_ARG):
            return True
        schema = self.catalog.schema(node.type)
        return schema is not None and schema.kind == BlockKind.VALUE

    def _expr(self, node: Node, socket: str, ctx: GenerationContext) -> str:
        return self.expressions.value(node, socket, ctx).code

    def _with_receiver(self, node: Node, call: str) -> List[str]:
        receiver = node.text_field("OUTN")
        if receiver:
            return [f"{receiver} = {call};"]
        return [f"{call};"]

    def _method_call(
        self,
        node: Node,
        receiver: str,
        method: str,
        sockets: Tuple[str, ...],
        ctx: GenerationContext,
    ) -> str:
        target = paren(self._expr(node, receiver, ctx))
        return self.expressions.call(f"{target}.{method}", node, sockets, ctx).code

    # Variables and control flow

    def _var_set(self, node: Node, ctx: GenerationContext) -> List[str]:
        name = self.expressions.variable_name(node)
        return [f"{name} = {self._expr(node, 'VALUE', ctx)};"]

    def _if(self, node: Node, ctx: GenerationContext) -> List[str]:
        lines = [f"if ({self._expr(node, 'COND', ctx)}) {{"]
        lines.extend(self.body(node, "DO", ctx.for_statement()))
        lines.append("}")
        if node.type == "ctrl_if_else":
            lines.append("else {")
            lines.extend(self.body(node, "ELSE", ctx.for_statement()))
            lines.append("}")
        return lines

    def _repeat(self, node: Node, ctx: GenerationContext) -> List[str]:
        count = self._expr(node, "COUNT", ctx)
        var = repeat_variable(ctx.repeat_depth)
        lines = [f"for (int {var} = 0; {var} < {count}; {var}++) {{"]
        lines.extend(self.body(node, "DO", ctx.for_repeat_body()))
        lines.append("}")
        return lines

    def _while(self, node: Node, ctx: GenerationContext) -> List[str]:
        lines = [f"while ({self._expr(node, 'COND', ctx)}) {{"]
        lines.extend(self.body(node, "DO", ctx.for_statement()))
        lines.append("}")
        return lines

    def _break(self, node: Node, ctx: GenerationContext) -> List[str]:
        return ["break;"]

    def _return(self, node: Node, ctx: GenerationContext) -> List[str]:
        signature = self.catalog.registry.get(ctx.procedure_id)
        if signature is None or not signature.returns_value:
            return ["return;"]
        child = self.workspace.value_target(node, "VALUE")
        if child is None:
            return [f"return {default_literal(signature.return_type)};"]
        return [f"return {self.expressions.compile(child, ctx).code};"]

    # Engine operations

    def _property_setter(self, node: Node, ctx: GenerationContext) -> List[str]:
        receiver, prop, socket = PROPERTY_SETTERS[node.type]
        target = paren(self._expr(node, receiver, ctx))
        return [f"{target}.{prop} = {self._expr(node, socket, ctx)};"]

    def _force_call(self, node: Node, ctx: GenerationContext) -> List[str]:
        receiver, method, socket = FORCE_CALLS[node.type]
        target = paren(self._expr(node, receiver, ctx))
        force = self._expr(node, socket, ctx)
        mode = choice(node.field("MODE"), FORCE_MODES)
        return [f"{target}.{method}({force}, ForceMode.{mode});"]

    def _animator_call(self, node: Node, ctx: GenerationContext) -> List[str]:
        method, key_field, socket = ANIMATOR_CALLS[node.type]
        target = paren(self._expr(node, "A", ctx))
        args = [cs_string_literal(node.field(key_field, ""))]
        if socket is not None:
            args.append(self._expr(node, socket, ctx))
        return [f"{target}.{method}({', '.join(args)});"]

    def _raycast(self, node: Node, ctx: GenerationContext) -> List[str]:
        origin = self._expr(node, "O", ctx)
        direction = self._expr(node, "D", ctx)
        distance = self._expr(node, "DIST", ctx)
        hit = node.text_field("HITN") or "_"
        call = f"Physics.Raycast({origin}, {direction}, out {hit}, {distance})"
        return self._with_receiver(node, call)

    def _get_component(self, node: Node, ctx: GenerationContext) -> List[str]:
        target = paren(self._expr(node, "GO", ctx))
        component = choice(node.field("CT"), COMPONENT_TYPES)
        return self._with_receiver(node, f"{target}.GetComponent<{component}>()")

    def _instantiate(self, node: Node, ctx: GenerationContext) -> List[str]:
        call = self.expressions.call("Instantiate", node, ("PREFAB", "POS", "ROT"), ctx)
        return self._with_receiver(node, call.code)

    def _debug_ray(self, node: Node, ctx: GenerationContext) -> List[str]:
        origin = self._expr(node, "O", ctx)
        direction = paren(self._expr(node, "D", ctx))
        length = self._expr(node, "L", ctx)
        return [f"Debug.DrawRay({origin}, {direction} * {length});"]

    def _add_listener(self, node: Node, ctx: GenerationContext) -> List[str]:
        target = paren(self._expr(node, "B", ctx))
        return [f"{target}.onClick.AddListener({node.text_field('FN')});"]

    def _list_set(self, node: Node, ctx: GenerationContext) -> List[str]:
        name = self.expressions.list_name(node)
        index = self._expr(node, "I", ctx)
        return [f"{name}[{index}] = {self._expr(node, 'V', ctx)};"]

    # Procedures

    def _procedure_call(self, node: Node, ctx: GenerationContext) -> List[str]:
        call = self.expressions.procedure_call(node, ctx).code
        signature = self.catalog.procedure_of(node)
        if signature is not None and signature.return_type == VOID:
            return [f"{call};"]
        return self._with_receiver(node, call)
