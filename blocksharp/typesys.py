from typing import Optional

VOID = "void"
LIST_PREFIX = "List_"

PRIMITIVE_TYPES = ("int", "float", "bool", "string")
STRUCT_TYPES = ("Vector2", "Vector3", "Quaternion", "Color")
ENGINE_TYPES = (
    "GameObject",
    "Transform",
    "Rigidbody",
    "Collider",
    "RaycastHit",
    "AudioSource",
    "AudioClip",
    "Animator",
    "TMP_Text",
    "Image",
    "Button",
    "Sprite",
    "Camera",
)

# Supported base types for global variables and procedure signatures.
BASE_TYPES = PRIMITIVE_TYPES + STRUCT_TYPES + ENGINE_TYPES

LIST_TYPES = tuple(f"{LIST_PREFIX}{t}" for t in BASE_TYPES)
ALL_VAR_TYPES = BASE_TYPES + LIST_TYPES
RETURN_TYPES = (VOID,) + ALL_VAR_TYPES

# GetComponent<T> only offers types that are components.
COMPONENT_TYPES = (
    "Transform",
    "Rigidbody",
    "Collider",
    "Animator",
    "AudioSource",
    "TMP_Text",
    "Image",
    "Button",
    "Camera",
)

TYPE_TO_CS = {
    VOID: "void",
    **{t: t for t in BASE_TYPES},
    "Collision": "Collision",
}

_DEFAULT_LITERALS = {
    "int": "0",
    "float": "0f",
    "bool": "false",
    "string": '""',
    "Vector2": "Vector2.zero",
    "Vector3": "Vector3.zero",
    "Quaternion": "Quaternion.identity",
    "Color": "Color.white",
    "RaycastHit": "default(RaycastHit)",
}

NULL_LITERAL = "null"


def is_list_type(token: Optional[str]) -> bool:
    return isinstance(token, str) and token.startswith(LIST_PREFIX)


def list_type(elem: str) -> str:
    if elem not in BASE_TYPES:
        raise ValueError(f"Lists of '{elem}' are not supported.")
    return f"{LIST_PREFIX}{elem}"


def element_type(token: Optional[str]) -> Optional[str]:
    """Return ``T`` for a well-formed ``List_T`` token, else None."""
    if not is_list_type(token):
        return None
    elem = token[len(LIST_PREFIX) :]
    return elem if elem in BASE_TYPES else None


def to_cs_type(token: Optional[str]) -> str:
    if not token:
        return "var"
    if is_list_type(token):
        elem = element_type(token)
        elem_cs = to_cs_type(elem) if elem else "object"
        return f"List<{elem_cs}>"
    return TYPE_TO_CS.get(token, token)


def default_literal(token: Optional[str]) -> str:
    """Literal used where a value of ``token`` is required but missing."""
    if not token:
        return NULL_LITERAL
    return _DEFAULT_LITERALS.get(token, NULL_LITERAL)
