from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func
import logging

from hotelhub.core.db import get_db
from hotelhub.core.security import issue_api_key
from hotelhub.models.account import Account
from hotelhub.models.api_key import ApiKey
from hotelhub.schemas.account import AccountCreate, AccountKeyOut
from hotelhub.services.internal_admin import require_internal_admin


log = logging.getLogger(__name__)
router = APIRouter()


@router.post("/accounts/bootstrap", response_model=AccountKeyOut, dependencies=[Depends(require_internal_admin)])
async def bootstrap_account(payload: AccountCreate, db: AsyncSession = Depends(get_db)) -> AccountKeyOut:
    """
    Provision an admin or merchant account with its first API key.
    Login and registration live outside this service; this is the ops hook
    that hands an account a key.
    """
    account = Account(
        username=payload.username,
        role=payload.role,
        display_name=payload.display_name or payload.username,
        is_active=True,
    )

    key = issue_api_key()
    try:
        db.add(account)
        await db.flush()  # assigns account.id within txn
        db.add(ApiKey(account_id=account.id, key_prefix=key.prefix, key_hash=key.hashed, is_active=True))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        log.exception("bootstrap failed: integrity error")
        raise HTTPException(status_code=409, detail="Username already taken")

    log.info("account %s bootstrapped as %s", account.id, account.role)
    return AccountKeyOut(
        message="Account created",
        account_id=account.id,
        username=account.username,
        role=account.role,
        api_key=key.plain,
    )


@router.post(
    "/accounts/{account_id}/rotate-key",
    response_model=AccountKeyOut,
    dependencies=[Depends(require_internal_admin)],
)
async def rotate_account_key(account_id: int, db: AsyncSession = Depends(get_db)) -> AccountKeyOut:
    account = (
        await db.execute(select(Account).where(Account.id == account_id))
    ).scalar_one_or_none()
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")

    # Disable previous keys
    await db.execute(
        update(ApiKey)
        .where(ApiKey.account_id == account_id, ApiKey.is_active == True)  # noqa: E712
        .values(is_active=False, rotated_at=func.now())
    )

    key = issue_api_key()
    try:
        db.add(ApiKey(account_id=account_id, key_prefix=key.prefix, key_hash=key.hashed, is_active=True))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        log.exception("rotate key failed")
        raise HTTPException(status_code=409, detail="Constraint violation")

    return AccountKeyOut(
        message="API key rotated",
        account_id=account.id,
        username=account.username,
        role=account.role,
        api_key=key.plain,
    )
