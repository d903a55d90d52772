"""JWT helpers and actor authorization dependencies.

Tokens are issued by the marketplace's identity provider; this service only
verifies them and reads the actor's id, role and (for store staff) store id.
"""
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from tindago_ledger.core.config import get_settings
from tindago_ledger.interfaces.http.schemas import TokenData

security = HTTPBearer()


def create_access_token(
    actor_id: str,
    role: str,
    store_id: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    settings = get_settings()
    payload = {
        "sub": actor_id,
        "role": role,
        "exp": datetime.utcnow() + (expires_delta or timedelta(hours=12)),
    }
    if store_id:
        payload["store_id"] = store_id
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenData:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials") from exc

    actor_id = payload.get("sub")
    role = payload.get("role")
    if not all([actor_id, role]):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials")
    return TokenData(actor_id=actor_id, role=role, store_id=payload.get("store_id"))


def is_authorized_admin(actor: TokenData) -> bool:
    return actor.role in get_settings().security.admin_roles


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> TokenData:
    return decode_access_token(credentials.credentials)


async def get_current_admin(actor: TokenData = Depends(get_current_actor)) -> TokenData:
    if not is_authorized_admin(actor):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return actor


def ensure_store_access(actor: TokenData, store_id: str) -> None:
    """Store staff may only act on their own store; admins may act on any."""
    if is_authorized_admin(actor):
        return
    if actor.store_id != store_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"No access to store {store_id}")
