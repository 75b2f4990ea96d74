from datetime import datetime

from sqlmodel import Field, SQLModel


class RefreshToken(SQLModel, table=True):
    """Server-side record of a portal session's refresh token.

    Looked up by the token's ``jti``. Refreshing revokes the presented row and
    stores the new one, so a replayed refresh token is refused. ``expires_at``
    is naive UTC, like every timestamp column in the portal.
    """

    __tablename__ = "refresh_tokens"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    jti: str = Field(unique=True, index=True)
    expires_at: datetime = Field(index=True)
    revoked: bool = False
