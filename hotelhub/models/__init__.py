from hotelhub.models.base import Base  # noqa: F401

from hotelhub.models.account import Account  # noqa: F401
from hotelhub.models.api_key import ApiKey  # noqa: F401
from hotelhub.models.hotel import Hotel, RoomType  # noqa: F401
from hotelhub.models.audit_log import AuditLog  # noqa: F401
from hotelhub.models.idempotency import IdempotencyKey  # noqa: F401
