"""
Single gate between callers and the workflow engine.

Endpoints and services never compare roles or owner ids themselves: they ask
this module which parties an actor plays for a listing and let the transition
table decide.
"""
from __future__ import annotations

import logging

from fastapi import Depends

from hotelhub.core.config import settings
from hotelhub.core.errors import HubError, PermissionDenied
from hotelhub.models.account import ROLE_ADMIN, ROLE_MERCHANT
from hotelhub.services.auth import Actor, get_actor
from hotelhub.services.workflow import (
    HotelAction,
    HotelStatus,
    Party,
    Transition,
    plan_transition,
    transition_table,
)


log = logging.getLogger(__name__)


def parties_for(actor: Actor, merchant_id: int | None) -> frozenset[Party]:
    """
    merchant_id is the listing owner, or None for a listing that does not
    exist yet (the submitting merchant becomes its owner).
    """
    if actor.is_admin:
        return frozenset({Party.ADMIN})
    if actor.role == ROLE_MERCHANT and (merchant_id is None or merchant_id == actor.account_id):
        return frozenset({Party.OWNER})
    return frozenset()


def authorize_transition(
    actor: Actor,
    *,
    action: HotelAction,
    current: HotelStatus | int | None,
    merchant_id: int | None,
    hotel_id: int | None = None,
    reason: str | None = None,
) -> Transition:
    try:
        return plan_transition(
            current=current,
            action=action,
            parties=parties_for(actor, merchant_id),
            reason=reason,
            table=transition_table(admin_delete_any_status=settings.admin_delete_any_status),
        )
    except HubError as e:
        log.info("hotel %s: %s refused for account %s (%s): %s",
                 hotel_id, action.value, actor.account_id, actor.role, e.message)
        raise


def authorize_read(actor: Actor, merchant_id: int) -> None:
    if not parties_for(actor, merchant_id):
        raise PermissionDenied("Not allowed to view this hotel")


def require_role(actor: Actor, role: str) -> None:
    if actor.role != role:
        raise PermissionDenied(f"{role.capitalize()} role required")


def role_gate(role: str):
    """Route dependency: the caller must hold `role` whatever the listing's state."""

    async def _gate(actor: Actor = Depends(get_actor)) -> Actor:
        require_role(actor, role)
        return actor

    return _gate


admin_only = role_gate(ROLE_ADMIN)
merchant_only = role_gate(ROLE_MERCHANT)
