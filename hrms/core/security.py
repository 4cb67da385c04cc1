from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from hrms.core.config import settings


def create_access_token(
    employee_uid: str,
    role_id: int,
    organization_id: int,
    expires_delta: timedelta | None = None,
) -> tuple[str, datetime]:
    """Mint a token carrying the claims the identity verifier expects.

    Token issuance belongs to the external authentication provider; this
    helper exists for local tooling and tests.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode: dict[str, Any] = {
        "sub": employee_uid,
        "role_id": role_id,
        "organization_id": organization_id,
        "exp": expire,
    }
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)
    return encoded_jwt, expire


def decode_access_token(token: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        return payload
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
