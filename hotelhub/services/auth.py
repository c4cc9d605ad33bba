from dataclasses import dataclass
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi.security.api_key import APIKeyHeader
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hotelhub.core.db import get_db
from hotelhub.core.security import hash_api_key
from hotelhub.models.account import ROLE_ADMIN, Account
from hotelhub.models.api_key import ApiKey

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    account_id: int
    role: str  # "admin" | "merchant"
    username: str
    display_name: str
    api_key_id: int

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def ref(self) -> str:
        # value written to updated_by columns
        return str(self.account_id)


async def get_actor(
    api_key: str | None = Security(api_key_header),
    bearer: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    # the admin console sends the same key as a bearer token
    plain = api_key or (bearer.credentials if bearer else None)
    if not plain:
        raise HTTPException(status_code=401, detail="Missing X-API-Key")

    hashed = hash_api_key(plain)
    stmt = (
        select(ApiKey, Account)
        .join(Account, Account.id == ApiKey.account_id)
        .where(ApiKey.key_hash == hashed, ApiKey.is_active.is_(True), Account.is_active.is_(True))
    )
    row = (await db.execute(stmt)).one_or_none()
    if not row:
        raise HTTPException(status_code=401, detail="Invalid API key")

    key, account = row
    return Actor(
        account_id=account.id,
        role=account.role,
        username=account.username,
        display_name=account.display_name,
        api_key_id=key.id,
    )
