# src/cm_admin/application/service.py
"""Admin application service: user listing and trading/admin permissions."""

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.cm_admin.application.schemas import AdminUserOut, UpdatePermissionsRequest, UserPage
from src.cm_common.errors import SelfDemotionError, UserNotFoundError
from src.cm_common.schemas import page_count
from src.cm_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)


class AdminService:
    async def list_users(self, db: AsyncSession, page: int, limit: int) -> UserPage:
        total = (await db.execute(select(func.count()).select_from(UserModel))).scalar_one()
        result = await db.execute(
            select(UserModel)
            .order_by(UserModel.created_at.desc(), UserModel.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return UserPage(
            users=[AdminUserOut.from_model(u) for u in result.scalars().all()],
            total_pages=page_count(int(total), limit),
            current_page=page,
            total=int(total),
        )

    async def update_permissions(
        self,
        db: AsyncSession,
        admin_id: str,
        user_id: str,
        req: UpdatePermissionsRequest,
    ) -> AdminUserOut:
        try:
            user_uuid = uuid.UUID(user_id)
        except ValueError:
            raise UserNotFoundError(user_id) from None

        try:
            result = await db.execute(
                select(UserModel).where(UserModel.id == user_uuid).with_for_update()
            )
            user = result.scalar_one_or_none()
            if user is None:
                raise UserNotFoundError(user_id)
            if str(user.id) == admin_id and req.is_admin is False:
                raise SelfDemotionError()

            if req.can_trade is not None:
                user.can_trade = req.can_trade
            if req.is_admin is not None:
                user.is_admin = req.is_admin
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Permissions updated: user=%s by=%s can_trade=%s is_admin=%s",
            user_id, admin_id, user.can_trade, user.is_admin,
        )
        return AdminUserOut.from_model(user)
