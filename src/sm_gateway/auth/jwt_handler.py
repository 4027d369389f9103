"""JWT token creation and verification.

The subject (`sub`) is the caller's wallet address. Tokens are issued by the
wallet-login service that shares JWT_SECRET; this module only needs to mint
them for that service and for tests.

MVP NOTE: HS256 (symmetric HMAC), no revocation. Tokens are valid until expiry.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.sm_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(address: str) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": address,
        "type": "access",
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, str]:
    """Decode and validate an access token. Raises InvalidCredentialsError."""
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access":
        raise InvalidCredentialsError()
    return payload
