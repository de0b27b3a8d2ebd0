"""Typed results returned across the core boundary.

The validator, the transition engine and the registry never raise for bad
input. They return either :class:`Accepted` or :class:`Rejected`, and the
caller (REST adapter, CLI) decides how to render the rejection.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Literal, TypeVar

T = TypeVar("T")


class RejectionKind(str, Enum):
    # Definition validation
    DUPLICATE_OR_MISSING_DEFINITION_ID = "DuplicateOrMissingDefinitionId"
    INVALID_INITIAL_STATE_COUNT = "InvalidInitialStateCount"
    DUPLICATE_STATE_ID = "DuplicateStateId"
    DUPLICATE_ACTION_ID = "DuplicateActionId"
    INVALID_ACTION_TARGET = "InvalidActionTarget"

    # Lookups
    DEFINITION_NOT_FOUND = "DefinitionNotFound"
    INSTANCE_NOT_FOUND = "InstanceNotFound"

    # Transitions
    ACTION_NOT_FOUND = "ActionNotFound"
    ACTION_DISABLED = "ActionDisabled"
    TRANSITION_NOT_ALLOWED_FROM_CURRENT_STATE = "TransitionNotAllowedFromCurrentState"
    CURRENT_STATE_IS_FINAL = "CurrentStateIsFinal"
    BROKEN_DEFINITION = "BrokenDefinition"

    @property
    def is_not_found(self) -> bool:
        return self in {RejectionKind.DEFINITION_NOT_FOUND, RejectionKind.INSTANCE_NOT_FOUND}

    @property
    def is_invariant_violation(self) -> bool:
        """True when stored data bypassed validation, rather than bad caller input."""

        return self is RejectionKind.BROKEN_DEFINITION


@dataclass(frozen=True, slots=True)
class Defect:
    """One failed check, with a message fit for showing to the caller."""

    kind: RejectionKind
    message: str

    def to_json(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


@dataclass(frozen=True, slots=True)
class Accepted(Generic[T]):
    value: T

    @property
    def ok(self) -> Literal[True]:
        return True


@dataclass(frozen=True, slots=True)
class Rejected:
    """A definitive "no" for a single request.

    ``kind`` and ``reason`` describe the first failing check. ``defects`` holds
    every failing check when the producer aggregates (definition validation);
    otherwise it holds just the one.
    """

    kind: RejectionKind
    reason: str
    defects: tuple[Defect, ...] = ()

    @property
    def ok(self) -> Literal[False]:
        return False

    @classmethod
    def single(cls, kind: RejectionKind, reason: str) -> Rejected:
        return cls(kind=kind, reason=reason, defects=(Defect(kind, reason),))

    @classmethod
    def from_defects(cls, defects: list[Defect]) -> Rejected:
        if not defects:
            raise ValueError("Rejected.from_defects() needs at least one defect")
        first = defects[0]
        return cls(kind=first.kind, reason=first.message, defects=tuple(defects))

    def to_json(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "message": self.reason,
            "defects": [d.to_json() for d in self.defects],
        }
