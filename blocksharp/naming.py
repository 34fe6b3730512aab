"""Identifier rules for user-declared variables, procedures and arguments."""

import re
from typing import Any, Optional

from blocksharp.typesys import TYPE_TO_CS

_CSHARP_KEYWORDS = frozenset(
    {
        "abstract", "as", "base", "bool", "break", "byte", "case", "catch", "char",
        "checked", "class", "const", "continue", "decimal", "default", "delegate", "do",
        "double", "else", "enum", "event", "explicit", "extern", "false", "finally",
        "fixed", "float", "for", "foreach", "goto", "if", "implicit", "in", "int",
        "interface", "internal", "is", "lock", "long", "namespace", "new", "null",
        "object", "operator", "out", "override", "params", "private", "protected",
        "public", "readonly", "ref", "return", "sbyte", "sealed", "short", "sizeof",
        "stackalloc", "static", "string", "struct", "switch", "this", "throw", "true",
        "try", "typeof", "uint", "ulong", "unchecked", "unsafe", "ushort", "using",
        "virtual", "void", "volatile", "while",
    }
)

_UNITY_EVENT_METHODS = frozenset(
    {
        "Start", "Update", "OnCollisionEnter", "OnCollisionStay", "OnCollisionExit",
        "OnTriggerEnter", "OnTriggerStay", "OnTriggerExit",
    }
)

# Members the generated code refers to by bare name.
_UNITY_MEMBERS = frozenset(
    {
        "gameObject", "transform", "position", "localPosition", "rotation",
        "localRotation", "eulerAngles", "localEulerAngles", "forward", "right", "up",
        "Translate", "Rotate", "LookAt", "AddForce", "AddTorque", "MovePosition",
        "MoveRotation", "useGravity", "isKinematic", "mass", "velocity",
        "angularVelocity", "Raycast", "Physics", "Debug", "Log", "DrawRay", "Input",
        "GetKey", "GetKeyDown", "GetKeyUp", "GetMouseButton", "GetMouseButtonDown",
        "GetMouseButtonUp", "GetAxis", "mousePosition", "Time", "deltaTime", "time",
        "Animator", "SetFloat", "SetBool", "SetTrigger", "ResetTrigger", "Play",
        "speed", "AudioSource", "PlayOneShot", "Stop", "Pause", "volume", "pitch",
        "loop", "SceneManager", "LoadScene", "Instantiate", "Destroy", "Button",
        "onClick", "AddListener",
    }
)

BANNED_IDENTIFIERS = frozenset(
    _CSHARP_KEYWORDS | _UNITY_EVENT_METHODS | _UNITY_MEMBERS | set(TYPE_TO_CS.values())
)

# Generated locals (repeat counters __i, __i1, ...) live under this prefix.
RESERVED_PREFIX = "__"

_WHITESPACE_RE = re.compile(r"\s")
_NON_PRINTABLE_ASCII_RE = re.compile(r"[^\x20-\x7e]")


def strict_name_problem(name: Any) -> Optional[str]:
    """Return the reason ``name`` is not an acceptable identifier, or None.

    Names must be exact: no surrounding or inner whitespace and printable
    ASCII only. Full-width characters are rejected rather than normalized.
    """
    if not isinstance(name, str):
        return "not_string"
    if not name:
        return "empty"
    if name != name.strip():
        return "leading_or_trailing_space"
    if _WHITESPACE_RE.search(name):
        return "contains_whitespace"
    if _NON_PRINTABLE_ASCII_RE.search(name):
        return "contains_non_ascii"
    return None


def is_banned(name: str) -> bool:
    return name in BANNED_IDENTIFIERS or name.startswith(RESERVED_PREFIX)
