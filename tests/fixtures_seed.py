import pytest_asyncio

from hotelhub.core.security import issue_api_key
from hotelhub.models.account import ROLE_ADMIN, ROLE_MERCHANT, Account
from hotelhub.models.api_key import ApiKey


async def _account_with_key(db_session, *, username: str, role: str, display_name: str) -> dict:
    account = Account(
        username=username,
        role=role,
        display_name=display_name,
        is_active=True,
    )
    db_session.add(account)
    await db_session.flush()

    key = issue_api_key()
    key_row = ApiKey(
        account_id=account.id,
        key_prefix=key.prefix,
        key_hash=key.hashed,
        is_active=True,
    )
    db_session.add(key_row)
    await db_session.flush()

    return {
        "account_id": account.id,
        "username": username,
        "display_name": display_name,
        "plain_key": key.plain,
        "headers": {"X-API-Key": key.plain},
        "api_key_id": key_row.id,
    }


@pytest_asyncio.fixture
async def seed_accounts(db_session):
    """Two merchants and one admin, committed so request sessions can see them."""
    merchant = await _account_with_key(
        db_session, username="merchant1", role=ROLE_MERCHANT, display_name="Harbour Hotels"
    )
    other_merchant = await _account_with_key(
        db_session, username="merchant2", role=ROLE_MERCHANT, display_name="Mountain Lodges"
    )
    admin = await _account_with_key(
        db_session, username="admin", role=ROLE_ADMIN, display_name="Ops Admin"
    )
    await db_session.commit()

    return {"merchant": merchant, "other_merchant": other_merchant, "admin": admin}
