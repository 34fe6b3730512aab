from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from blocksharp.block_schemas import (
    PROC_ARG,
    PROC_CALL_VAL,
    BlockCatalog,
    procedure_arg_index,
    procedure_arg_socket,
)
from blocksharp.program import Node, Workspace
from blocksharp.scope import GenerationContext, RestrictedRef
from blocksharp.typesys import default_literal

from .constants import (
    ARG_PLACEHOLDER,
    EXPR_PLACEHOLDER,
    KEY_FUNCTIONS,
    LIST_PLACEHOLDER,
    MOUSE_BUTTONS,
    MOUSE_FUNCTIONS,
    OPERATOR_CHOICES,
    VAR_PLACEHOLDER,
)
from .helpers import (
    cs_string_literal,
    format_bool_literal,
    format_float_literal,
    format_int_literal,
    paren,
)


@dataclass(frozen=True)
class ExprResult:
    code: str
    illegal: bool = False


# block type -> (callee, value sockets)
STATIC_CALLS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "mathf_abs": ("Mathf.Abs", ("X",)),
    "mathf_clamp": ("Mathf.Clamp", ("X", "MIN", "MAX")),
    "mathf_clamp01": ("Mathf.Clamp01", ("X",)),
    "mathf_min": ("Mathf.Min", ("A", "B")),
    "mathf_max": ("Mathf.Max", ("A", "B")),
    "mathf_lerp": ("Mathf.Lerp", ("A", "B", "T")),
    "mathf_sqrt": ("Mathf.Sqrt", ("X",)),
    "quat_euler": ("Quaternion.Euler", ("E",)),
    "vec3_distance": ("Vector3.Distance", ("A", "B")),
    "vec3_dot": ("Vector3.Dot", ("A", "B")),
    "vec3_cross": ("Vector3.Cross", ("A", "B")),
    "make_vector2": ("new Vector2", ("X", "Y")),
    "make_vector3": ("new Vector3", ("X", "Y", "Z")),
    "color_rgba": ("new Color", ("R", "G", "B", "A")),
}

CONSTANT_EXPRESSIONS: Dict[str, str] = {
    "vec3_zero": "Vector3.zero",
    "quat_identity": "Quaternion.identity",
    "color_white": "Color.white",
    "color_black": "Color.black",
    "time_deltaTime": "Time.deltaTime",
    "time_time": "Time.time",
    "input_mousepos": "Input.mousePosition",
}

# block type -> (receiver socket, property)
PROPERTY_GETTERS: Dict[str, Tuple[str, str]] = {
    "go_get_transform": ("GO", "transform"),
    "tr_get_gameobject": ("TR", "gameObject"),
    "tr_pos": ("TR", "position"),
    "tr_lpos": ("TR", "localPosition"),
    "tr_rot": ("TR", "rotation"),
    "tr_lrot": ("TR", "localRotation"),
    "tr_euler": ("TR", "eulerAngles"),
    "tr_leuler": ("TR", "localEulerAngles"),
    "tr_forward": ("TR", "forward"),
    "tr_right": ("TR", "right"),
    "tr_up": ("TR", "up"),
    "rb_get_useGravity": ("RB", "useGravity"),
    "rb_get_isKinematic": ("RB", "isKinematic"),
    "rb_get_mass": ("RB", "mass"),
    "rb_get_vel": ("RB", "velocity"),
    "rb_get_angvel": ("RB", "angularVelocity"),
    "hit_point": ("H", "point"),
    "hit_normal": ("H", "normal"),
    "hit_distance": ("H", "distance"),
    "hit_collider": ("H", "collider"),
    "hit_transform": ("H", "transform"),
    "col_get_go": ("C", "gameObject"),
    "col_get_tr": ("C", "transform"),
    "vec3_magnitude": ("V", "magnitude"),
    "vec3_normalized": ("V", "normalized"),
    "anim_get_speed": ("A", "speed"),
    "aud_get_volume": ("S", "volume"),
    "aud_get_pitch": ("S", "pitch"),
    "aud_get_loop": ("S", "loop"),
    "tmp_get_text": ("T", "text"),
}

# block type -> (left socket, operator, right socket)
FIXED_INFIX: Dict[str, Tuple[str, str, str]] = {
    "logic_and": ("A", "&&", "B"),
    "logic_or": ("A", "||", "B"),
    "vec3_add": ("A", "+", "B"),
    "vec3_sub": ("A", "-", "B"),
    "vec3_mul": ("V", "*", "S"),
    "vec3_div": ("V", "/", "S"),
}

CASTS: Dict[str, str] = {
    "cast_int_to_float": "float",
    "cast_float_to_int": "int",
}

# block type -> (restricted reference, rendered text)
EVENT_PARAMETER_READS: Dict[str, Tuple[RestrictedRef, str]] = {
    "collision_get_collider": (RestrictedRef.COLLISION, "collision.collider"),
    "collision_get_go": (RestrictedRef.COLLISION, "collision.gameObject"),
    "collision_get_tr": (RestrictedRef.COLLISION, "collision.transform"),
    "other_get": (RestrictedRef.OTHER, "other"),
    "other_get_go": (RestrictedRef.OTHER, "other.gameObject"),
    "other_get_tr": (RestrictedRef.OTHER, "other.transform"),
}


def choice(value, options: Sequence[str]) -> str:
    """Dropdown semantics: unknown choices fall back to the first option."""
    text = "" if value is None else str(value)
    return text if text in options else options[0]


class ExpressionCompiler:
    """Translates value-producing nodes into C# expressions.

    Rules are total: empty sockets become the expected type's default
    literal and unknown node types become a placeholder comment.
    """

    def __init__(self, workspace: Workspace, catalog: BlockCatalog):
        self.workspace = workspace
        self.catalog = catalog
        self._handlers: Dict[str, Callable[[Node, GenerationContext], ExprResult]] = {
            "const_int": self._const_int,
            "const_float": self._const_float,
            "const_bool": self._const_bool,
            "const_string": self._const_string,
            "var_get": self._var_get,
            "logic_not": self._logic_not,
            "input_getkey": self._input_getkey,
            "input_getmouse": self._input_getmouse,
            "input_getaxis": self._input_getaxis,
            "list_count": self._list_count,
            "list_get": self._list_get,
            "list_contains": self._list_contains,
            "list_indexof": self._list_indexof,
            PROC_CALL_VAL: self._procedure_call,
            PROC_ARG: self._procedure_arg,
        }

    def compile(self, node: Node, ctx: GenerationContext) -> ExprResult:
        handler = self._handlers.get(node.type)
        if handler is not None:
            return handler(node, ctx)

        if node.type in OPERATOR_CHOICES:
            op = choice(node.field("OP"), OPERATOR_CHOICES[node.type])
            return self.infix(node, "A", op, "B", ctx)
        if node.type in FIXED_INFIX:
            left, op, right = FIXED_INFIX[node.type]
            return self.infix(node, left, op, right, ctx)
        if node.type in STATIC_CALLS:
            callee, sockets = STATIC_CALLS[node.type]
            return self.call(callee, node, sockets, ctx)
        if node.type in PROPERTY_GETTERS:
            socket, prop = PROPERTY_GETTERS[node.type]
            receiver = self.value(node, socket, ctx)
            return ExprResult(f"{paren(receiver.code)}.{prop}", receiver.illegal)
        if node.type in CONSTANT_EXPRESSIONS:
            return ExprResult(CONSTANT_EXPRESSIONS[node.type])
        if node.type in CASTS:
            operand = self.value(node, "V", ctx)
            return ExprResult(f"({CASTS[node.type]}){paren(operand.code)}", operand.illegal)
        if node.type in EVENT_PARAMETER_READS:
            ref, code = EVENT_PARAMETER_READS[node.type]
            legal = ctx.check(ref)
            return ExprResult(code, not legal)

        return ExprResult(EXPR_PLACEHOLDER)

    def value(self, node: Node, socket: str, ctx: GenerationContext) -> ExprResult:
        """Compile the child in ``socket`` or fall back to a default literal."""
        child = self.workspace.value_target(node, socket)
        if child is None:
            expected = self.catalog.input_check(node, socket, self.workspace)
            return ExprResult(default_literal(expected))
        return self.compile(child, ctx)

    def values(
        self, node: Node, sockets: Sequence[str], ctx: GenerationContext
    ) -> Tuple[List[str], bool]:
        codes = []
        illegal = False
        for socket in sockets:
            result = self.value(node, socket, ctx)
            codes.append(result.code)
            illegal = illegal or result.illegal
        return codes, illegal

    def infix(
        self, node: Node, left: str, op: str, right: str, ctx: GenerationContext
    ) -> ExprResult:
        a = self.value(node, left, ctx)
        b = self.value(node, right, ctx)
        return ExprResult(paren(f"{a.code} {op} {b.code}"), a.illegal or b.illegal)

    def call(
        self, callee: str, node: Node, sockets: Sequence[str], ctx: GenerationContext
    ) -> ExprResult:
        args, illegal = self.values(node, sockets, ctx)
        return ExprResult(f"{callee}({', '.join(args)})", illegal)

    def procedure_call(self, node: Node, ctx: GenerationContext) -> ExprResult:
        """``Name(args...)`` for a call node of either kind."""
        signature = self.catalog.procedure_of(node)
        if signature is not None:
            name = signature.name
            sockets = [procedure_arg_socket(index) for index in range(len(signature.args))]
        else:
            name = node.text_field("NAME") or f"Proc_{node.field('PROC', '')}"
            sockets = []
            while procedure_arg_socket(len(sockets)) in node.inputs:
                sockets.append(procedure_arg_socket(len(sockets)))
        return self.call(name, node, sockets, ctx)

    def variable_name(self, node: Node) -> str:
        return node.text_field("VAR") or VAR_PLACEHOLDER

    def list_name(self, node: Node) -> str:
        return node.text_field("L") or LIST_PLACEHOLDER

    # Literals and variables

    def _const_int(self, node: Node, ctx: GenerationContext) -> ExprResult:
        return ExprResult(format_int_literal(node.field("N", 0)))

    def _const_float(self, node: Node, ctx: GenerationContext) -> ExprResult:
        return ExprResult(format_float_literal(node.field("N", 0)))

    def _const_bool(self, node: Node, ctx: GenerationContext) -> ExprResult:
        return ExprResult(format_bool_literal(node.field("B")))

    def _const_string(self, node: Node, ctx: GenerationContext) -> ExprResult:
        return ExprResult(cs_string_literal(node.field("S", "")))

    def _var_get(self, node: Node, ctx: GenerationContext) -> ExprResult:
        return ExprResult(self.variable_name(node))

    def _logic_not(self, node: Node, ctx: GenerationContext) -> ExprResult:
        operand = self.value(node, "A", ctx)
        return ExprResult(paren(f"!{paren(operand.code)}"), operand.illegal)

    # Input

    def _input_getkey(self, node: Node, ctx: GenerationContext) -> ExprResult:
        fn = KEY_FUNCTIONS.get(str(node.field("MODE")), KEY_FUNCTIONS["stay"])
        return ExprResult(f"{fn}(KeyCode.{node.text_field('KEY') or 'None'})")

    def _input_getmouse(self, node: Node, ctx: GenerationContext) -> ExprResult:
        fn = MOUSE_FUNCTIONS.get(str(node.field("MODE")), MOUSE_FUNCTIONS["stay"])
        return ExprResult(f"{fn}({choice(node.field('BTN'), MOUSE_BUTTONS)})")

    def _input_getaxis(self, node: Node, ctx: GenerationContext) -> ExprResult:
        return ExprResult(f"Input.GetAxis({cs_string_literal(node.field('AXIS', ''))})")

    # Lists

    def _list_count(self, node: Node, ctx: GenerationContext) -> ExprResult:
        return ExprResult(f"{self.list_name(node)}.Count")

    def _list_get(self, node: Node, ctx: GenerationContext) -> ExprResult:
        index = self.value(node, "I", ctx)
        return ExprResult(f"{self.list_name(node)}[{index.code}]", index.illegal)

    def _list_contains(self, node: Node, ctx: GenerationContext) -> ExprResult:
        return self.call(f"{self.list_name(node)}.Contains", node, ("V",), ctx)

    def _list_indexof(self, node: Node, ctx: GenerationContext) -> ExprResult:
        return self.call(f"{self.list_name(node)}.IndexOf", node, ("V",), ctx)

    # Procedures

    def _procedure_call(self, node: Node, ctx: GenerationContext) -> ExprResult:
        return self.procedure_call(node, ctx)

    def _procedure_arg(self, node: Node, ctx: GenerationContext) -> ExprResult:
        procedure_id: Optional[str] = node.field("PROC")
        legal = ctx.check(RestrictedRef.PROCEDURE_ARG, procedure_id)

        signature = self.catalog.procedure_of(node)
        arg = signature.arg(procedure_arg_index(node)) if signature is not None else None
        name = arg.name if arg is not None else node.text_field("ARG") or ARG_PLACEHOLDER
        return ExprResult(name, not legal)
