"""Tests for cm_common.cents — integer arithmetic utilities."""

import pytest

from src.cm_common.cents import calculate_commission, cents_to_display, validate_amount


class TestValidateAmount:
    def test_positive_amounts(self) -> None:
        for amount in [1, 150, 10_000_00]:
            validate_amount(amount)

    def test_zero_raises(self) -> None:
        with pytest.raises(ValueError, match="greater than 0"):
            validate_amount(0)

    def test_negative_raises(self) -> None:
        with pytest.raises(ValueError):
            validate_amount(-5)


class TestCentsToDisplay:
    def test_basic(self) -> None:
        assert cents_to_display(6500) == "$65.00"

    def test_one_cent(self) -> None:
        assert cents_to_display(1) == "$0.01"

    def test_large(self) -> None:
        assert cents_to_display(150000) == "$1,500.00"

    def test_negative(self) -> None:
        assert cents_to_display(-1200) == "-$12.00"


class TestCalculateCommission:
    def test_default_rate_exact(self) -> None:
        # 3% of $150.00
        assert calculate_commission(15000, 300) == 450

    def test_rounds_up(self) -> None:
        # 3% of $0.50 = 1.5 cents → 2
        assert calculate_commission(50, 300) == 2

    def test_one_cent_minimum_for_tiny_amounts(self) -> None:
        assert calculate_commission(1, 100) == 1

    def test_zero_rate(self) -> None:
        assert calculate_commission(15000, 0) == 0

    def test_vendor_rate(self) -> None:
        assert calculate_commission(12345, 500) == 618  # 617.25 → 618
