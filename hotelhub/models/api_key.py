from datetime import datetime

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from hotelhub.models.base import Base


class ApiKey(Base):
    """Hashed credential of one account. Rotation deactivates, never deletes."""

    __tablename__ = "api_keys"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id"), index=True)

    # public part of the key, safe to show in logs and the console
    key_prefix: Mapped[str] = mapped_column(String(16), index=True)
    # HMAC-SHA256 hex digest of the full key
    key_hash: Mapped[str] = mapped_column(String(64), unique=True)

    is_active: Mapped[bool] = mapped_column(default=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    rotated_at: Mapped[datetime | None]
