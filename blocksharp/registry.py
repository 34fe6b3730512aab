from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from blocksharp.typesys import VOID

DEFAULT_CLASS_NAME = "MyScript"


@dataclass(frozen=True)
class ProcedureArg:
    name: str
    type: str


@dataclass(frozen=True)
class ProcedureSignature:
    id: str
    name: str
    return_type: str = VOID
    args: Tuple[ProcedureArg, ...] = field(default_factory=tuple)

    @property
    def returns_value(self) -> bool:
        return self.return_type != VOID

    def arg(self, index: int) -> Optional[ProcedureArg]:
        if 0 <= index < len(self.args):
            return self.args[index]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "returnType": self.return_type,
            "args": [{"name": arg.name, "type": arg.type} for arg in self.args],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ProcedureSignature":
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name", "")),
            return_type=str(payload.get("returnType") or VOID),
            args=tuple(
                ProcedureArg(name=str(arg["name"]), type=str(arg["type"]))
                for arg in payload.get("args") or []
            ),
        )


class ProcedureRegistry:
    """
    Symbol table of user-declared procedures plus the document class name.

    No validation happens here: names, collisions and argument limits are
    checked by :class:`blocksharp.session.EditorSession` before ``add``.
    """

    def __init__(self, class_name: str = DEFAULT_CLASS_NAME):
        self.class_name = class_name
        self._procedures: Dict[str, ProcedureSignature] = {}

    def set_class_name(self, name: str) -> None:
        self.class_name = name

    def add(self, signature: ProcedureSignature) -> None:
        self._procedures[signature.id] = signature

    def remove(self, procedure_id: str) -> Optional[ProcedureSignature]:
        return self._procedures.pop(procedure_id, None)

    def get(self, procedure_id: Optional[str]) -> Optional[ProcedureSignature]:
        if procedure_id is None:
            return None
        return self._procedures.get(procedure_id)

    def has(self, procedure_id: str) -> bool:
        return procedure_id in self._procedures

    def procedures(self) -> List[ProcedureSignature]:
        return list(self._procedures.values())

    def by_name(self, name: str) -> Optional[ProcedureSignature]:
        for signature in self._procedures.values():
            if signature.name == name:
                return signature
        return None

    def __len__(self) -> int:
        return len(self._procedures)
