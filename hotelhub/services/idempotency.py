"""
Safe retries for listing submission.

A merchant console that timed out on POST /hotels cannot know whether the
listing was created. Sending the same Idempotency-Key again returns the first
response instead of creating a second listing.
"""
from __future__ import annotations

import hashlib
import json
from typing import Any

from fastapi import Header
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hotelhub.core.errors import ConflictError, ValidationError
from hotelhub.models.idempotency import IdempotencyKey
from hotelhub.services.auth import Actor


MAX_KEY_LENGTH = 200


def fingerprint(path: str, body: dict[str, Any]) -> str:
    raw = json.dumps({"path": path, "body": body}, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


async def optional_idempotency_key(
    key: str | None = Header(default=None, alias="Idempotency-Key"),
) -> str | None:
    if key is not None and len(key) > MAX_KEY_LENGTH:
        raise ValidationError(f"Idempotency-Key must be at most {MAX_KEY_LENGTH} characters")
    return key or None


async def _lookup(db: AsyncSession, actor: Actor, key: str) -> IdempotencyKey | None:
    stmt = select(IdempotencyKey).where(
        IdempotencyKey.account_id == actor.account_id,
        IdempotencyKey.key == key,
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def replay_or_reserve(
    db: AsyncSession,
    actor: Actor,
    key: str,
    *,
    path: str,
    body: dict[str, Any],
) -> dict[str, Any] | None:
    """
    Returns the stored response of an earlier request with this key, or None
    after reserving the key for the current request. The reservation is part
    of the caller's transaction, so a failed request releases it.
    """
    request_hash = fingerprint(path, body)
    row = await _lookup(db, actor, key)
    if row is not None:
        if row.request_hash != request_hash:
            raise ConflictError("Idempotency-Key reuse with different request")
        return row.response or None

    db.add(IdempotencyKey(account_id=actor.account_id, key=key, request_hash=request_hash, response={}))
    try:
        await db.flush()
    except IntegrityError as e:
        # a concurrent request reserved the same key between our lookup and insert
        await db.rollback()
        raise ConflictError("Idempotency-Key is already in use by a request in progress") from e
    return None


async def remember_response(db: AsyncSession, actor: Actor, key: str, response: dict[str, Any]) -> None:
    row = await _lookup(db, actor, key)
    row.response = response
    await db.flush()
