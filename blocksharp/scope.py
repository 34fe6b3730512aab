"""Generation scopes and legality of context-restricted identifiers.

Three identifiers are only meaningful inside a particular body: the
``collision`` parameter of collision handlers, the ``other`` parameter of
trigger handlers, and the arguments of a procedure inside that procedure's
own definition. Everything else is legal everywhere.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union


class EventParam(Enum):
    COLLISION = "collision"
    OTHER = "other"


@dataclass(frozen=True)
class GlobalScope:
    pass


@dataclass(frozen=True)
class EventScope:
    param: Optional[EventParam] = None


@dataclass(frozen=True)
class ProcedureScope:
    procedure_id: str


Scope = Union[GlobalScope, EventScope, ProcedureScope]


class RestrictedRef(Enum):
    COLLISION = "collision"
    OTHER = "other"
    PROCEDURE_ARG = "procedure_arg"


def is_legal(
    ref: RestrictedRef,
    scope: Scope,
    procedure_id: Optional[str] = None,
) -> bool:
    """Return whether ``ref`` may be read while generating inside ``scope``."""
    if ref == RestrictedRef.COLLISION:
        return isinstance(scope, EventScope) and scope.param == EventParam.COLLISION
    if ref == RestrictedRef.OTHER:
        return isinstance(scope, EventScope) and scope.param == EventParam.OTHER
    if ref == RestrictedRef.PROCEDURE_ARG:
        return (
            isinstance(scope, ProcedureScope)
            and procedure_id is not None
            and scope.procedure_id == procedure_id
        )
    raise AssertionError(f"Unknown restricted reference: {ref!r}")


@dataclass
class GenerationContext:
    scope: Scope
    illegal: bool = False
    repeat_depth: int = 0

    def for_statement(self) -> "GenerationContext":
        """Fresh accumulator for one statement; ambient state is kept."""
        return replace(self, illegal=False)

    def for_repeat_body(self) -> "GenerationContext":
        return replace(self, illegal=False, repeat_depth=self.repeat_depth + 1)

    def check(
        self,
        ref: RestrictedRef,
        procedure_id: Optional[str] = None,
    ) -> bool:
        """Check ``ref`` and record an illegal use on this context."""
        legal = is_legal(ref, self.scope, procedure_id)
        if not legal:
            self.illegal = True
        return legal

    @property
    def procedure_id(self) -> Optional[str]:
        if isinstance(self.scope, ProcedureScope):
            return self.scope.procedure_id
        return None
