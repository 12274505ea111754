"""Admin user-management schemas. Password hashes never leave the service."""

from src.cm_common.datetime_utils import isoformat_or_none
from src.cm_common.schemas import CamelModel
from src.cm_gateway.user.db_models import UserModel


class UpdatePermissionsRequest(CamelModel):
    can_trade: bool | None = None
    is_admin: bool | None = None


class AdminUserOut(CamelModel):
    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    phone: str | None
    is_active: bool
    is_verified: bool
    can_trade: bool
    is_admin: bool
    created_at: str | None

    @classmethod
    def from_model(cls, user: UserModel) -> "AdminUserOut":
        return cls(
            id=str(user.id),
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            is_active=user.is_active,
            is_verified=user.is_verified,
            can_trade=user.can_trade,
            is_admin=user.is_admin,
            created_at=isoformat_or_none(user.created_at),
        )


class UserPage(CamelModel):
    users: list[AdminUserOut]
    total_pages: int
    current_page: int
    total: int
