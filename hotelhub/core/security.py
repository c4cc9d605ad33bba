import hashlib
import hmac
import secrets
from dataclasses import dataclass

from hotelhub.core.config import settings


KEY_SCHEME = "hh"


@dataclass(frozen=True)
class IssuedKey:
    prefix: str
    plain: str  # shown to the caller once, never stored
    hashed: str


def issue_api_key() -> IssuedKey:
    # hh_<prefix>_<secret>; the prefix identifies the key in logs without revealing it
    prefix = secrets.token_hex(4)
    plain = f"{KEY_SCHEME}_{prefix}_{secrets.token_urlsafe(32)}"
    return IssuedKey(prefix=prefix, plain=plain, hashed=hash_api_key(plain))


def hash_api_key(plain: str) -> str:
    pepper = settings.api_key_pepper.get_secret_value().encode("utf-8")
    return hmac.new(pepper, plain.encode("utf-8"), hashlib.sha256).hexdigest()


def secrets_match(given: str | None, expected: str) -> bool:
    if not given:
        return False
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))
