from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import settings
from portal.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from portal.models.refresh_token import RefreshToken
from portal.models.user import User, UserCreate, UserPublic

TokenPairResult = tuple[User, str, str, int]


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def create_user(session: AsyncSession, data: UserCreate) -> User:
    user = User(
        email=data.email.strip().lower(),
        first_name=data.first_name,
        last_name=data.last_name,
        telephone=data.telephone,
        hashed_password=hash_password(data.password),
    )
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


def user_to_public(user: User) -> UserPublic:
    return UserPublic(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        telephone=user.telephone,
        role=user.role,
    )


def make_token_pair(user_id: int) -> tuple[str, str, int]:
    access = create_access_token(user_id)
    refresh = create_refresh_token(user_id)
    expires_in = settings.access_token_expire_minutes * 60
    return access, refresh, expires_in


def _utc_naive() -> datetime:
    """Naive UTC datetime for DB columns that are TIMESTAMP WITHOUT TIME ZONE."""
    return datetime.now(UTC).replace(tzinfo=None)


async def store_refresh_token(session: AsyncSession, user_id: int, refresh_token: str) -> None:
    user_id_str, jti = decode_refresh_token(refresh_token)
    if not user_id_str or not jti:
        return
    expires_at = _utc_naive() + timedelta(days=settings.refresh_token_expire_days)
    session.add(RefreshToken(user_id=user_id, jti=jti, expires_at=expires_at))
    await session.flush()


async def _issue_tokens(session: AsyncSession, user: User) -> TokenPairResult:
    access, refresh, expires_in = make_token_pair(user.id)
    await store_refresh_token(session, user_id=user.id, refresh_token=refresh)
    return user, access, refresh, expires_in


async def login_user(session: AsyncSession, email: str, password: str) -> TokenPairResult | None:
    user = await get_user_by_email(session, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return await _issue_tokens(session, user)


async def signup_user(session: AsyncSession, data: UserCreate) -> TokenPairResult | None:
    if await get_user_by_email(session, data.email):
        return None
    user = await create_user(session, data)
    return await _issue_tokens(session, user)


async def revoke_refresh_token(session: AsyncSession, jti: str) -> None:
    result = await session.execute(select(RefreshToken).where(RefreshToken.jti == jti))
    row = result.scalar_one_or_none()
    if row:
        row.revoked = True
        session.add(row)


async def refresh_tokens(session: AsyncSession, refresh_token: str) -> TokenPairResult | None:
    """Rotate: the presented refresh token is revoked and a new pair issued."""
    user_id_str, jti = decode_refresh_token(refresh_token)
    if not user_id_str or not jti:
        return None
    result = await session.execute(
        select(RefreshToken).where(
            RefreshToken.jti == jti,
            RefreshToken.revoked == False,  # noqa: E712
            RefreshToken.expires_at > _utc_naive(),
        )
    )
    token_row = result.scalar_one_or_none()
    if not token_row:
        return None
    user = await session.get(User, int(user_id_str))
    if not user:
        return None
    token_row.revoked = True
    session.add(token_row)
    return await _issue_tokens(session, user)
