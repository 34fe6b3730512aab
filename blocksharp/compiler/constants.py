from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from blocksharp.scope import EventParam

USING_DIRECTIVES = (
    "System.Collections",
    "System.Collections.Generic",
    "UnityEngine",
    "UnityEngine.SceneManagement",
    "UnityEngine.UI",
    "TMPro",
)

BASE_CLASS = "MonoBehaviour"
INDENT = "    "

SCOPE_OUT_MARKER = "scope-out: generated as comment"
COMMENT_PREFIX = "// "

REPEAT_VAR = "__i"

VAR_PLACEHOLDER = "/* var */"
LIST_PLACEHOLDER = "/* list */"
EXPR_PLACEHOLDER = "/* expr */"
ARG_PLACEHOLDER = "arg"


@dataclass(frozen=True)
class EventHandlerSpec:
    block_type: str
    method: str
    parameter: str
    param: Optional[EventParam]
    always_emit: bool = False


EVENT_HANDLERS: Tuple[EventHandlerSpec, ...] = (
    EventHandlerSpec("evt_start", "Start", "", None, always_emit=True),
    EventHandlerSpec("evt_update", "Update", "", None, always_emit=True),
    EventHandlerSpec(
        "evt_collision_enter", "OnCollisionEnter", "Collision collision", EventParam.COLLISION
    ),
    EventHandlerSpec(
        "evt_collision_stay", "OnCollisionStay", "Collision collision", EventParam.COLLISION
    ),
    EventHandlerSpec(
        "evt_collision_exit", "OnCollisionExit", "Collision collision", EventParam.COLLISION
    ),
    EventHandlerSpec("evt_trigger_enter", "OnTriggerEnter", "Collider other", EventParam.OTHER),
    EventHandlerSpec("evt_trigger_stay", "OnTriggerStay", "Collider other", EventParam.OTHER),
    EventHandlerSpec("evt_trigger_exit", "OnTriggerExit", "Collider other", EventParam.OTHER),
)

# First entry is the dropdown default.
_ARITH_OPS = ("+", "-", "*", "/")
_CMP_OPS = ("==", "!=", "<", "<=", ">", ">=")
_EQ_OPS = ("==", "!=")

OPERATOR_CHOICES: Dict[str, Tuple[str, ...]] = {
    "arith_int": _ARITH_OPS,
    "arith_float": _ARITH_OPS,
    "cmp_int": _CMP_OPS,
    "cmp_float": _CMP_OPS,
    "eq_bool": _EQ_OPS,
    "eq_string": _EQ_OPS,
}

KEY_FUNCTIONS = {
    "down": "Input.GetKeyDown",
    "stay": "Input.GetKey",
    "up": "Input.GetKeyUp",
}
MOUSE_FUNCTIONS = {
    "down": "Input.GetMouseButtonDown",
    "stay": "Input.GetMouseButton",
    "up": "Input.GetMouseButtonUp",
}
MOUSE_BUTTONS = ("0", "1", "2")
FORCE_MODES = ("Force", "Impulse", "Acceleration", "VelocityChange")

__all__ = [
    "USING_DIRECTIVES",
    "BASE_CLASS",
    "INDENT",
    "SCOPE_OUT_MARKER",
    "COMMENT_PREFIX",
    "REPEAT_VAR",
    "VAR_PLACEHOLDER",
    "LIST_PLACEHOLDER",
    "EXPR_PLACEHOLDER",
    "ARG_PLACEHOLDER",
    "EventHandlerSpec",
    "EVENT_HANDLERS",
    "OPERATOR_CHOICES",
    "KEY_FUNCTIONS",
    "MOUSE_FUNCTIONS",
    "MOUSE_BUTTONS",
    "FORCE_MODES",
]
