from __future__ import annotations

from typing import Annotated, Callable, Iterable

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt

from .core.config import get_settings
from .roles import Role
from .services.access_guard import Principal

# ---------------------------------------------------------------------------
#  Token decoding. Tokens are minted by the identity provider; this service
#  only verifies them and reads ``sub`` and ``role``.
# ---------------------------------------------------------------------------


def decode_token(token: str) -> dict:
    """Verify *token* and return its payload."""
    settings = get_settings()
    try:
        payload: dict = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token") from exc
    return payload


# ---------------------------------------------------------------------------
#  Dependencies
# ---------------------------------------------------------------------------
async def _extract_token(req: Request) -> str | None:
    """Return JWT from Authorization header *or* access_token cookie."""
    auth: str | None = req.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth.split(" ", 1)[1]
    return req.cookies.get("access_token")


async def current_principal(req: Request) -> Principal:
    """FastAPI dependency returning the verified caller or raising 401."""
    token = await _extract_token(req)
    if not token:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing credentials")
    payload = decode_token(token)
    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    return Principal(id=str(sub), role=str(payload.get("role") or Role.tenant.value).lower())


def _to_role_str(value: "str | Role") -> str:
    """Return the *string* value of a Role or raw str."""
    if isinstance(value, Role):
        return value.value
    return str(value)


def role_required(*allowed: "str | Role | Iterable[str | Role]") -> Callable[[Principal], Principal]:
    """Return a dependency that checks the caller's role is within *allowed*.

    Usage:
        @router.put("/{id}/status", dependencies=[Depends(role_required("admin", "manager"))])
        async def update():
            ...
    """
    # Flatten iterables (allow role_required([Role.admin, Role.manager]))
    if len(allowed) == 1 and isinstance(allowed[0], (list, tuple, set)):
        allowed = tuple(allowed[0])
    allowed_set = {_to_role_str(a) for a in allowed}

    async def _dep(principal: Annotated[Principal, Depends(current_principal)]):
        if principal.role not in allowed_set:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Forbidden")
        return principal

    return _dep


PrincipalDep = Annotated[Principal, Depends(current_principal)]
