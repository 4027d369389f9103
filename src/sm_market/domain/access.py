"""Single-authority access control."""

from src.sm_common.errors import InvalidAdminError, NotAdminError


def require_admin(admin: str, caller: str) -> None:
    if caller != admin:
        raise NotAdminError(caller)


def validate_new_admin(new_admin: str) -> None:
    if not new_admin or not new_admin.strip():
        raise InvalidAdminError()
