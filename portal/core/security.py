from datetime import UTC, datetime, timedelta
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from portal.core.config import settings

ACCESS = "access"
REFRESH = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(user_id: str | int, token_type: str, lifetime: timedelta, **claims: str) -> str:
    claims.update(sub=str(user_id), type=token_type)
    return jwt.encode(
        {**claims, "exp": datetime.now(UTC) + lifetime}, settings.secret_key, algorithm=settings.algorithm
    )


def _claims(token: str, token_type: str) -> dict:
    """Verified claims of a token of the given type; empty when invalid, expired or of another type."""
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return {}
    return claims if claims.get("type") == token_type else {}


def create_access_token(user_id: str | int) -> str:
    return _encode(user_id, ACCESS, timedelta(minutes=settings.access_token_expire_minutes))


def create_refresh_token(user_id: str | int) -> str:
    # Each refresh token carries its own jti so a stored row can be revoked on rotation
    return _encode(user_id, REFRESH, timedelta(days=settings.refresh_token_expire_days), jti=uuid4().hex)


def decode_access_token(token: str) -> str | None:
    return _claims(token, ACCESS).get("sub") or None


def decode_refresh_token(token: str) -> tuple[str | None, str | None]:
    """(user id, jti) of a valid refresh token, else (None, None)."""
    claims = _claims(token, REFRESH)
    if not claims.get("sub") or not claims.get("jti"):
        return None, None
    return claims["sub"], claims["jti"]
