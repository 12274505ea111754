"""Unit tests for cm_gateway Pydantic schemas."""

import pytest
from pydantic import ValidationError

from src.cm_gateway.user.schemas import RegisterRequest, UserInfo
from tests.unit.fakes import make_user


def _register(**overrides) -> RegisterRequest:
    values = {
        "username": "alice",
        "email": "alice@example.com",
        "password": "SecureP@ss1",
        "firstName": "Alice",
        "lastName": "Oak",
    }
    values.update(overrides)
    return RegisterRequest.model_validate(values)


class TestRegisterRequest:
    def test_valid_input(self) -> None:
        req = _register()
        assert req.username == "alice"
        assert req.first_name == "Alice"
        assert req.phone is None

    def test_username_too_short(self) -> None:
        with pytest.raises(ValidationError):
            _register(username="ab")

    def test_username_too_long(self) -> None:
        with pytest.raises(ValidationError):
            _register(username="a" * 21)

    def test_username_invalid_chars(self) -> None:
        with pytest.raises(ValidationError):
            _register(username="alice!")

    def test_invalid_email(self) -> None:
        with pytest.raises(ValidationError):
            _register(email="not-an-email")

    @pytest.mark.parametrize("password", ["short1A", "alllower1", "ALLUPPER1", "NoDigitsHere"])
    def test_weak_password(self, password: str) -> None:
        with pytest.raises(ValidationError):
            _register(password=password)

    def test_names_are_stripped(self) -> None:
        assert _register(firstName="  Alice ").first_name == "Alice"

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _register(lastName="   ")

    def test_names_required(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest.model_validate(
                {"username": "alice", "email": "a@b.com", "password": "SecureP@ss1"}
            )


def test_user_info_exposes_permission_flags() -> None:
    user = make_user(can_trade=False, is_admin=True)
    wire = UserInfo.from_model(user).to_wire()
    assert wire["userId"] == str(user.id)
    assert wire["canTrade"] is False
    assert wire["isAdmin"] is True
    assert "passwordHash" not in wire
