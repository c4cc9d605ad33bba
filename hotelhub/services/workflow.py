"""
Hotel listing lifecycle.

A listing is created Pending and moves between four states under merchant and
admin actions. Every legal move is one row of the transition table below; any
(state, action) pair missing from the table is an illegal transition. The
engine is pure: it decides, the store applies.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Mapping

from hotelhub.core.errors import InvalidTransition, PermissionDenied, ValidationError


MAX_REASON_LENGTH = 500


class HotelStatus(IntEnum):
    PENDING = 0
    PUBLISHED = 1
    REJECTED = 2
    OFFLINE = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class HotelAction(str, Enum):
    SUBMIT = "submit"
    WITHDRAW = "withdraw"
    APPROVE = "approve"
    REJECT = "reject"
    OFFLINE = "offline"
    EDIT = "edit"
    DELETE = "delete"


class Party(str, Enum):
    # relation of an actor to one listing, resolved by services/authorization.py
    OWNER = "owner"
    ADMIN = "admin"


@dataclass(frozen=True)
class TransitionRule:
    parties: frozenset[Party]
    # None means the record is deleted
    target: HotelStatus | None
    records_reason: bool = False
    replaces_content: bool = False

    @property
    def deletes(self) -> bool:
        return self.target is None


_OWNER = frozenset({Party.OWNER})
_ADMIN = frozenset({Party.ADMIN})
_OWNER_OR_ADMIN = frozenset({Party.OWNER, Party.ADMIN})


TRANSITIONS: Mapping[tuple[HotelStatus | None, HotelAction], TransitionRule] = {
    (None, HotelAction.SUBMIT): TransitionRule(_OWNER, HotelStatus.PENDING, replaces_content=True),

    (HotelStatus.PENDING, HotelAction.WITHDRAW): TransitionRule(_OWNER, None),
    (HotelStatus.PENDING, HotelAction.APPROVE): TransitionRule(_ADMIN, HotelStatus.PUBLISHED),
    (HotelStatus.PENDING, HotelAction.REJECT): TransitionRule(_ADMIN, HotelStatus.REJECTED, records_reason=True),

    (HotelStatus.PUBLISHED, HotelAction.OFFLINE): TransitionRule(_ADMIN, HotelStatus.OFFLINE, records_reason=True),
    (HotelStatus.PUBLISHED, HotelAction.EDIT): TransitionRule(_OWNER, HotelStatus.PENDING, replaces_content=True),

    (HotelStatus.REJECTED, HotelAction.EDIT): TransitionRule(_OWNER, HotelStatus.PENDING, replaces_content=True),
    (HotelStatus.REJECTED, HotelAction.DELETE): TransitionRule(_OWNER, None),

    (HotelStatus.OFFLINE, HotelAction.EDIT): TransitionRule(_OWNER, HotelStatus.PENDING, replaces_content=True),
    (HotelStatus.OFFLINE, HotelAction.DELETE): TransitionRule(_OWNER_OR_ADMIN, None),
}

# Enabled by settings.admin_delete_any_status.
ADMIN_DELETE_ANY_STATUS: Mapping[tuple[HotelStatus | None, HotelAction], TransitionRule] = {
    (HotelStatus.PENDING, HotelAction.DELETE): TransitionRule(_ADMIN, None),
    (HotelStatus.PUBLISHED, HotelAction.DELETE): TransitionRule(_ADMIN, None),
}


def transition_table(*, admin_delete_any_status: bool = False) -> dict[tuple[HotelStatus | None, HotelAction], TransitionRule]:
    table = dict(TRANSITIONS)
    if admin_delete_any_status:
        table.update(ADMIN_DELETE_ANY_STATUS)
    return table


@dataclass(frozen=True)
class Transition:
    from_status: HotelStatus | None
    action: HotelAction
    rule: TransitionRule
    reason: str | None = None

    @property
    def to_status(self) -> HotelStatus | None:
        return self.rule.target

    @property
    def cancellation(self) -> str | None:
        # only reject/offline record a reason; every other surviving state clears it
        return self.reason if self.rule.records_reason else None

    def describe(self) -> str:
        src = self.from_status.label if self.from_status is not None else "new"
        dst = self.to_status.label if self.to_status is not None else "deleted"
        return f"{src} -> {dst}"


def normalize_reason(reason: str | None) -> str:
    """Blank or missing reasons become "" so a rejection always leaves a non-null cancellation."""
    if reason is None:
        return ""
    cleaned = reason.strip()
    if len(cleaned) > MAX_REASON_LENGTH:
        raise ValidationError(f"Reason must be at most {MAX_REASON_LENGTH} characters")
    return cleaned


def _parties_allowed_anywhere(table: Mapping, action: HotelAction) -> frozenset[Party]:
    allowed: set[Party] = set()
    for (_, act), rule in table.items():
        if act == action:
            allowed |= rule.parties
    return frozenset(allowed)


def plan_transition(
    *,
    current: HotelStatus | int | None,
    action: HotelAction,
    parties: frozenset[Party],
    reason: str | None = None,
    table: Mapping[tuple[HotelStatus | None, HotelAction], TransitionRule] = TRANSITIONS,
) -> Transition:
    """
    Decide whether `parties` may apply `action` to a listing in state `current`.

    Raises PermissionDenied when no party of the actor may perform the action
    at all (or not from this state) and InvalidTransition when the action is
    not defined for the current state.
    """
    status = HotelStatus(current) if current is not None else None

    if not parties & _parties_allowed_anywhere(table, action):
        raise PermissionDenied(f"Not allowed to {action.value} this hotel")

    label = status.label if status is not None else "new"
    rule = table.get((status, action))
    if rule is None:
        raise InvalidTransition(
            f"Cannot {action.value} a hotel that is {label}",
            current_status=int(status) if status is not None else None,
            action=action.value,
        )

    if not parties & rule.parties:
        raise PermissionDenied(f"Not allowed to {action.value} a hotel that is {label}")

    return Transition(
        from_status=status,
        action=action,
        rule=rule,
        reason=normalize_reason(reason) if rule.records_reason else None,
    )


def cancellation_consistent(status: HotelStatus | int, cancellation: str | None) -> bool:
    return (cancellation is not None) == (HotelStatus(status) in (HotelStatus.REJECTED, HotelStatus.OFFLINE))
