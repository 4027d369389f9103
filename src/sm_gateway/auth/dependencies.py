"""FastAPI dependency: get_current_caller.

Usage in any protected router:
    from src.sm_gateway.auth.dependencies import get_current_caller

    @router.post("/protected")
    async def protected(caller: Annotated[str, Depends(get_current_caller)]):
        ...

Authority checks are NOT done here: the engine decides who the admin is.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.sm_common.errors import InvalidCredentialsError
from src.sm_gateway.auth.jwt_handler import decode_token

bearer_scheme = HTTPBearer(auto_error=False)

# Reusable 401 exception with WWW-Authenticate header
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Return the wallet address in the bearer token's `sub` claim.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    """
    if credentials is None:
        raise _CREDENTIALS_EXCEPTION
    try:
        payload = decode_token(credentials.credentials)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    address = payload.get("sub")
    if not address:
        raise _CREDENTIALS_EXCEPTION
    return address
