from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from blocksharp.program import Node, Workspace
from blocksharp.registry import ProcedureRegistry, ProcedureSignature
from blocksharp.typesys import VOID, element_type


class BlockKind(Enum):
    HAT = "hat"
    STATEMENT = "statement"
    VALUE = "value"


@dataclass(frozen=True)
class BlockSchema:
    type: str
    kind: BlockKind
    category: str
    output: Optional[str] = None
    inputs: Tuple[Tuple[str, Optional[str]], ...] = ()
    statements: Tuple[str, ...] = ()
    fields: Tuple[str, ...] = ()

    def input_check(self, socket: str) -> Optional[str]:
        for name, check in self.inputs:
            if name == socket:
                return check
        return None


MAX_PROCEDURE_ARGS = 6

PROC_DEF = "proc_def"
PROC_CALL_STMT = "proc_call_stmt"
PROC_CALL_VAL = "proc_call_val"
PROC_ARG = "proc_arg"
PROCEDURE_NODE_TYPES = (PROC_DEF, PROC_CALL_STMT, PROC_CALL_VAL, PROC_ARG)

# Value sockets whose check follows the bound (list) variable.
_VARIABLE_TYPED_INPUTS = {("var_set", "VALUE")}
_ELEMENT_TYPED_INPUTS = {
    ("list_add", "V"),
    ("list_insert", "V"),
    ("list_remove", "V"),
    ("list_contains", "V"),
    ("list_indexof", "V"),
    ("list_set", "V"),
}


def procedure_arg_socket(index: int) -> str:
    return f"A{index}"


def _hat(block_type: str, category: str = "events", **kwargs) -> BlockSchema:
    return BlockSchema(block_type, BlockKind.HAT, category, **kwargs)


def _stmt(block_type: str, category: str, *inputs, **kwargs) -> BlockSchema:
    return BlockSchema(block_type, BlockKind.STATEMENT, category, inputs=tuple(inputs), **kwargs)


def _value(block_type: str, category: str, output: Optional[str], *inputs, **kwargs) -> BlockSchema:
    return BlockSchema(
        block_type, BlockKind.VALUE, category, output=output, inputs=tuple(inputs), **kwargs
    )


_V3 = "Vector3"
_TR = ("TR", "Transform")
_RB = ("RB", "Rigidbody")
_HIT = ("H", "RaycastHit")
_ANIM = ("A", "Animator")
_AUD = ("S", "AudioSource")
_LIST = ("L",)

_BUILTIN_SCHEMAS: Tuple[BlockSchema, ...] = (
    # Events
    _hat("evt_start"),
    _hat("evt_update"),
    _hat("evt_collision_enter"),
    _hat("evt_collision_stay"),
    _hat("evt_collision_exit"),
    _hat("evt_trigger_enter"),
    _hat("evt_trigger_stay"),
    _hat("evt_trigger_exit"),
    # Control
    _stmt("ctrl_if", "control", ("COND", "bool"), statements=("DO",)),
    _stmt("ctrl_if_else", "control", ("COND", "bool"), statements=("DO", "ELSE")),
    _stmt("ctrl_repeat", "control", ("COUNT", "int"), statements=("DO",)),
    _stmt("ctrl_while", "control", ("COND", "bool"), statements=("DO",)),
    _stmt("ctrl_break", "control"),
    _stmt("ctrl_return", "control", ("VALUE", None)),
    # Variables
    _value("var_get", "vars", None, fields=("VAR",)),
    _stmt("var_set", "vars", ("VALUE", None), fields=("VAR",)),
    # Literals and casts
    _value("const_int", "math", "int", fields=("N",)),
    _value("const_float", "math", "float", fields=("N",)),
    _value("const_bool", "math", "bool", fields=("B",)),
    _value("const_string", "math", "string", fields=("S",)),
    _value("cast_int_to_float", "math", "float", ("V", "int")),
    _value("cast_float_to_int", "math", "int", ("V", "float")),
    # Operators
    _value("arith_int", "math", "int", ("A", "int"), ("B", "int"), fields=("OP",)),
    _value("arith_float", "math", "float", ("A", "float"), ("B", "float"), fields=("OP",)),
    _value("cmp_int", "math", "bool", ("A", "int"), ("B", "int"), fields=("OP",)),
    _value("cmp_float", "math", "bool", ("A", "float"), ("B", "float"), fields=("OP",)),
    _value("eq_bool", "math", "bool", ("A", "bool"), ("B", "bool"), fields=("OP",)),
    _value("eq_string", "math", "bool", ("A", "string"), ("B", "string"), fields=("OP",)),
    _value("logic_and", "math", "bool", ("A", "bool"), ("B", "bool")),
    _value("logic_or", "math", "bool", ("A", "bool"), ("B", "bool")),
    _value("logic_not", "math", "bool", ("A", "bool")),
    # Mathf
    _value("mathf_abs", "math", "float", ("X", "float")),
    _value("mathf_clamp", "math", "float", ("X", "float"), ("MIN", "float"), ("MAX", "float")),
    _value("mathf_clamp01", "math", "float", ("X", "float")),
    _value("mathf_min", "math", "float", ("A", "float"), ("B", "float")),
    _value("mathf_max", "math", "float", ("A", "float"), ("B", "float")),
    _value("mathf_lerp", "math", "float", ("A", "float"), ("B", "float"), ("T", "float")),
    _value("mathf_sqrt", "math", "float", ("X", "float")),
    # Vectors, rotations, colors
    _value("make_vector2", "vector", "Vector2", ("X", "float"), ("Y", "float")),
    _value("make_vector3", "vector", _V3, ("X", "float"), ("Y", "float"), ("Z", "float")),
    _value("quat_euler", "vector", "Quaternion", ("E", _V3)),
    _value(
        "color_rgba", "vector", "Color", ("R", "float"), ("G", "float"), ("B", "float"), ("A", "float")
    ),
    _value("vec3_zero", "vector", _V3),
    _value("quat_identity", "vector", "Quaternion"),
    _value("color_white", "vector", "Color"),
    _value("color_black", "vector", "Color"),
    _value("vec3_add", "vector", _V3, ("A", _V3), ("B", _V3)),
    _value("vec3_sub", "vector", _V3, ("A", _V3), ("B", _V3)),
    _value("vec3_mul", "vector", _V3, ("V", _V3), ("S", "float")),
    _value("vec3_div", "vector", _V3, ("V", _V3), ("S", "float")),
    _value("vec3_magnitude", "vector", "float", ("V", _V3)),
    _value("vec3_normalized", "vector", _V3, ("V", _V3)),
    _value("vec3_distance", "vector", "float", ("A", _V3), ("B", _V3)),
    _value("vec3_dot", "vector", "float", ("A", _V3), ("B", _V3)),
    _value("vec3_cross", "vector", _V3, ("A", _V3), ("B", _V3)),
    # Time and input
    _value("time_deltaTime", "time", "float"),
    _value("time_time", "time", "float"),
    _value("input_getkey", "unity", "bool", fields=("KEY", "MODE")),
    _value("input_getmouse", "unity", "bool", fields=("BTN", "MODE")),
    _value("input_getaxis", "unity", "float", fields=("AXIS",)),
    _value("input_mousepos", "unity", _V3),
    # GameObject / Transform
    _value("go_get_transform", "unity", "Transform", ("GO", "GameObject")),
    _value("tr_get_gameobject", "unity", "GameObject", _TR),
    _stmt("go_getcomponent", "unity", ("GO", "GameObject"), fields=("OUTN", "CT")),
    _value("tr_pos", "unity", _V3, _TR),
    _value("tr_lpos", "unity", _V3, _TR),
    _value("tr_rot", "unity", "Quaternion", _TR),
    _value("tr_lrot", "unity", "Quaternion", _TR),
    _value("tr_euler", "unity", _V3, _TR),
    _value("tr_leuler", "unity", _V3, _TR),
    _value("tr_forward", "unity", _V3, _TR),
    _value("tr_right", "unity", _V3, _TR),
    _value("tr_up", "unity", _V3, _TR),
    _stmt("tr_set_pos", "unity", _TR, ("V", _V3)),
    _stmt("tr_set_lpos", "unity", _TR, ("V", _V3)),
    _stmt("tr_set_rot", "unity", _TR, ("Q", "Quaternion")),
    _stmt("tr_set_lrot", "unity", _TR, ("Q", "Quaternion")),
    _stmt("tr_set_euler", "unity", _TR, ("E", _V3)),
    _stmt("tr_set_leuler", "unity", _TR, ("E", _V3)),
    _stmt("tr_translate", "unity", _TR, ("D", _V3)),
    _stmt("tr_rotate", "unity", _TR, ("E", _V3)),
    _stmt("tr_lookat_tr", "unity", _TR, ("T", "Transform")),
    _stmt("tr_lookat_v3", "unity", _TR, ("P", _V3)),
    # Physics
    _stmt("rb_addforce", "physics", _RB, ("F", _V3), fields=("MODE",)),
    _stmt("rb_addtorque", "physics", _RB, ("TQ", _V3), fields=("MODE",)),
    _stmt("rb_movepos", "physics", _RB, ("P", _V3)),
    _stmt("rb_moverot", "physics", _RB, ("Q", "Quaternion")),
    _value("rb_get_useGravity", "physics", "bool", _RB),
    _stmt("rb_set_useGravity", "physics", _RB, ("B", "bool")),
    _value("rb_get_isKinematic", "physics", "bool", _RB),
    _stmt("rb_set_isKinematic", "physics", _RB, ("B", "bool")),
    _value("rb_get_mass", "physics", "float", _RB),
    _stmt("rb_set_mass", "physics", _RB, ("M", "float")),
    _value("rb_get_vel", "physics", _V3, _RB),
    _stmt("rb_set_vel", "physics", _RB, ("V", _V3)),
    _value("rb_get_angvel", "physics", _V3, _RB),
    _stmt("rb_set_angvel", "physics", _RB, ("V", _V3)),
    _stmt(
        "physics_raycast",
        "physics",
        ("O", _V3),
        ("D", _V3),
        ("DIST", "float"),
        fields=("OUTN", "HITN"),
    ),
    _value("hit_point", "physics", _V3, _HIT),
    _value("hit_normal", "physics", _V3, _HIT),
    _value("hit_distance", "physics", "float", _HIT),
    _value("hit_collider", "physics", "Collider", _HIT),
    _value("hit_transform", "physics", "Transform", _HIT),
    _value("col_get_go", "physics", "GameObject", ("C", "Collider")),
    _value("col_get_tr", "physics", "Transform", ("C", "Collider")),
    # Event parameters
    _value("collision_get_collider", "events", "Collider"),
    _value("collision_get_go", "events", "GameObject"),
    _value("collision_get_tr", "events", "Transform"),
    _value("other_get", "events", "Collider"),
    _value("other_get_go", "events", "GameObject"),
    _value("other_get_tr", "events", "Transform"),
    # Animation
    _stmt("anim_setFloat", "anim", _ANIM, ("V", "float"), fields=("K",)),
    _stmt("anim_setBool", "anim", _ANIM, ("V", "bool"), fields=("K",)),
    _stmt("anim_setTrigger", "anim", _ANIM, fields=("K",)),
    _stmt("anim_resetTrigger", "anim", _ANIM, fields=("K",)),
    _stmt("anim_play", "anim", _ANIM, fields=("S",)),
    _stmt("anim_set_speed", "anim", _ANIM, ("V", "float")),
    _value("anim_get_speed", "anim", "float", _ANIM),
    # Audio
    _stmt("aud_play", "audio", _AUD),
    _stmt("aud_stop", "audio", _AUD),
    _stmt("aud_pause", "audio", _AUD),
    _stmt("aud_playoneshot", "audio", _AUD, ("C", "AudioClip")),
    _stmt("aud_set_volume", "audio", _AUD, ("V", "float")),
    _value("aud_get_volume", "audio", "float", _AUD),
    _stmt("aud_set_pitch", "audio", _AUD, ("V", "float")),
    _value("aud_get_pitch", "audio", "float", _AUD),
    _stmt("aud_set_loop", "audio", _AUD, ("B", "bool")),
    _value("aud_get_loop", "audio", "bool", _AUD),
    # Scene and object lifecycle
    _stmt("scene_load", "scene", ("N", "string")),
    _stmt(
        "unity_instantiate",
        "unity",
        ("PREFAB", "GameObject"),
        ("POS", _V3),
        ("ROT", "Quaternion"),
        fields=("OUTN",),
    ),
    _stmt("unity_destroy", "unity", ("T", "float"), ("O", "GameObject")),
    # Debug
    _stmt("dbg_log", "debug", ("S", "string")),
    _stmt("dbg_ray", "debug", ("O", _V3), ("D", _V3), ("L", "float")),
    # UI
    _value("tmp_get_text", "ui", "string", ("T", "TMP_Text")),
    _stmt("tmp_set_text", "ui", ("T", "TMP_Text"), ("S", "string")),
    _stmt("img_set_sprite", "ui", ("I", "Image"), ("S", "Sprite")),
    _stmt("btn_addlistener", "ui", ("B", "Button"), fields=("FN",)),
    # Lists
    _stmt("list_add", "lists", ("V", None), fields=_LIST),
    _stmt("list_insert", "lists", ("I", "int"), ("V", None), fields=_LIST),
    _stmt("list_remove", "lists", ("V", None), fields=_LIST),
    _stmt("list_removeat", "lists", ("I", "int"), fields=_LIST),
    _stmt("list_clear", "lists", fields=_LIST),
    _stmt("list_set", "lists", ("I", "int"), ("V", None), fields=_LIST),
    _value("list_contains", "lists", "bool", ("V", None), fields=_LIST),
    _value("list_indexof", "lists", "int", ("V", None), fields=_LIST),
    _value("list_count", "lists", "int", fields=_LIST),
    _value("list_get", "lists", None, ("I", "int"), fields=_LIST),
)

BUILTIN_SCHEMAS: Dict[str, BlockSchema] = {schema.type: schema for schema in _BUILTIN_SCHEMAS}


class BlockCatalog:
    """
    Resolves node schemas and socket types against the procedure registry.

    Procedure nodes form one generic family (definition, call statement,
    call value, argument reference) whose ``PROC`` field names the procedure;
    their sockets come from the registered signature.
    """

    def __init__(self, registry: ProcedureRegistry):
        self.registry = registry

    def schema(self, node_type: str) -> Optional[BlockSchema]:
        return BUILTIN_SCHEMAS.get(node_type)

    def procedure_of(self, node: Node) -> Optional[ProcedureSignature]:
        if node.type not in PROCEDURE_NODE_TYPES:
            return None
        return self.registry.get(node.field("PROC"))

    def input_check(self, node: Node, socket: str, workspace: Workspace) -> Optional[str]:
        """Expected type of ``socket`` on ``node``; None when unconstrained."""
        key = (node.type, socket)
        if key in _VARIABLE_TYPED_INPUTS:
            variable = workspace.variable(node.field("VAR"))
            return variable.type if variable is not None else None
        if key in _ELEMENT_TYPED_INPUTS:
            variable = workspace.variable(node.field("L"))
            return element_type(variable.type) if variable is not None else None

        if node.type in (PROC_CALL_STMT, PROC_CALL_VAL):
            signature = self.procedure_of(node)
            if signature is None:
                return None
            for index, arg in enumerate(signature.args):
                if procedure_arg_socket(index) == socket:
                    return arg.type
            return None

        schema = self.schema(node.type)
        return schema.input_check(socket) if schema is not None else None

    def output_type(self, node: Node, workspace: Workspace) -> Optional[str]:
        if node.type == "var_get":
            variable = workspace.variable(node.field("VAR"))
            return variable.type if variable is not None else None
        if node.type == "list_get":
            variable = workspace.variable(node.field("L"))
            return element_type(variable.type) if variable is not None else None
        if node.type == PROC_CALL_VAL:
            signature = self.procedure_of(node)
            return signature.return_type if signature is not None else None
        if node.type == PROC_ARG:
            signature = self.procedure_of(node)
            arg = signature.arg(procedure_arg_index(node)) if signature is not None else None
            return arg.type if arg is not None else None
        schema = self.schema(node.type)
        return schema.output if schema is not None else None

    def describe(self) -> List[Dict[str, Any]]:
        """Node-type catalog offered to the editor host.

        Built-in descriptors come first, then the procedure family for every
        registered procedure.
        """
        out = [_describe_schema(schema) for schema in _BUILTIN_SCHEMAS]
        for signature in self.registry.procedures():
            out.extend(self.describe_procedure(signature))
        return out

    def describe_procedure(self, signature: ProcedureSignature) -> List[Dict[str, Any]]:
        arg_inputs = tuple(
            (procedure_arg_socket(index), arg.type) for index, arg in enumerate(signature.args)
        )
        call_fields = ("PROC", "OUTN") if signature.returns_value else ("PROC",)
        schemas = [
            _hat(PROC_DEF, "proc", statements=("DO",), fields=("PROC",)),
            _stmt(PROC_CALL_STMT, "proc", *arg_inputs, fields=call_fields),
        ]
        if signature.returns_value:
            schemas.append(
                _value(PROC_CALL_VAL, "proc", signature.return_type, *arg_inputs, fields=("PROC",))
            )

        out = []
        for schema in schemas:
            descriptor = _describe_schema(schema)
            descriptor["procedure_id"] = signature.id
            descriptor["label"] = signature.name
            out.append(descriptor)
        for index, arg in enumerate(signature.args):
            descriptor = _describe_schema(
                _value(PROC_ARG, "proc", arg.type, fields=("PROC", "INDEX"))
            )
            descriptor["procedure_id"] = signature.id
            descriptor["label"] = arg.name
            descriptor["index"] = index
            out.append(descriptor)
        return out


def procedure_arg_index(node: Node) -> int:
    try:
        return int(node.field("INDEX", -1))
    except (TypeError, ValueError):
        return -1


def tooltip_for(schema: BlockSchema) -> str:
    """``"<ReturnType> (<ArgType>, ...)"`` built from socket checks."""
    if schema.kind == BlockKind.VALUE:
        ret = schema.output or "any"
    else:
        ret = VOID
    args = [check or "any" for _, check in schema.inputs]
    return f"{ret} ({', '.join(args)})" if args else ret


def _describe_schema(schema: BlockSchema) -> Dict[str, Any]:
    return {
        "type": schema.type,
        "kind": schema.kind.value,
        "category": schema.category,
        "output": schema.output,
        "inputs": [{"name": name, "check": check} for name, check in schema.inputs],
        "statements": list(schema.statements),
        "fields": list(schema.fields),
        "tooltip": tooltip_for(schema),
    }
