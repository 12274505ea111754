"""Unit tests for AdminService permission management."""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.cm_admin.application.schemas import AdminUserOut, UpdatePermissionsRequest
from src.cm_admin.application.service import AdminService
from src.cm_common.errors import SelfDemotionError, UserNotFoundError
from tests.unit.fakes import make_user


def _db_with_user(user) -> AsyncMock:
    db = AsyncMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = user
    db.execute.return_value = result
    return db


async def test_grant_trading() -> None:
    admin = make_user(is_admin=True)
    target = make_user(can_trade=False)
    db = _db_with_user(target)

    out = await AdminService().update_permissions(
        db, str(admin.id), str(target.id), UpdatePermissionsRequest(can_trade=True)
    )

    assert out.can_trade is True
    assert out.is_admin is False
    db.commit.assert_awaited_once()


async def test_omitted_flag_left_alone() -> None:
    target = make_user(can_trade=True, is_admin=False)
    db = _db_with_user(target)
    out = await AdminService().update_permissions(
        db, str(uuid.uuid4()), str(target.id), UpdatePermissionsRequest(is_admin=True)
    )
    assert out.can_trade is True
    assert out.is_admin is True


async def test_admin_cannot_remove_own_admin_flag() -> None:
    admin = make_user(is_admin=True)
    db = _db_with_user(admin)
    with pytest.raises(SelfDemotionError):
        await AdminService().update_permissions(
            db, str(admin.id), str(admin.id), UpdatePermissionsRequest(is_admin=False)
        )
    assert admin.is_admin is True
    db.rollback.assert_awaited_once()


async def test_unknown_user() -> None:
    db = _db_with_user(None)
    with pytest.raises(UserNotFoundError):
        await AdminService().update_permissions(
            db, str(uuid.uuid4()), str(uuid.uuid4()), UpdatePermissionsRequest(can_trade=True)
        )


async def test_malformed_user_id() -> None:
    db = AsyncMock()
    with pytest.raises(UserNotFoundError):
        await AdminService().update_permissions(
            db, str(uuid.uuid4()), "not-a-uuid", UpdatePermissionsRequest(can_trade=True)
        )
    db.execute.assert_not_awaited()


async def test_list_users_pages() -> None:
    users = [make_user(), make_user()]
    count_result = MagicMock()
    count_result.scalar_one.return_value = 5
    rows_result = MagicMock()
    rows_result.scalars.return_value.all.return_value = users
    db = AsyncMock()
    db.execute.side_effect = [count_result, rows_result]

    page = await AdminService().list_users(db, page=1, limit=2)

    assert page.total == 5
    assert page.total_pages == 3
    assert [u.id for u in page.users] == [str(u.id) for u in users]


def test_user_out_has_no_password() -> None:
    wire = AdminUserOut.from_model(make_user()).to_wire()
    assert "passwordHash" not in wire
    assert "password" not in wire
    assert wire["canTrade"] is True
