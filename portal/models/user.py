from enum import Enum

from sqlmodel import Field, SQLModel


class UserRole(str, Enum):
    client = "client"
    admin = "admin"
    superadmin = "superadmin"


ADMIN_ROLES = (UserRole.admin.value, UserRole.superadmin.value)


class UserBase(SQLModel):
    email: str = Field(unique=True, index=True)
    first_name: str | None = None
    last_name: str | None = None
    telephone: str | None = None
    role: str = UserRole.client.value


class User(UserBase, table=True):
    __tablename__ = "users"
    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


class UserCreate(SQLModel):
    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None
    telephone: str | None = None


class UserPublic(SQLModel):
    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    telephone: str | None = None
    role: str
