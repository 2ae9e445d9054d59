"""Unit tests for Money, Quantity and PhoneNumber."""

from decimal import Decimal

import pytest

from preorder.domain.exceptions import ValidationError
from preorder.domain.model.order import Customer
from preorder.domain.model.value_objects import Money, PhoneNumber, Quantity


class TestMoney:

    def test_addition(self):
        assert Money.of("15000") + Money.of("2500") == Money.of("17500")

    def test_multiplication(self):
        assert Money.of("15000") * 3 == Money.of("45000")

    def test_rupiah_display(self):
        assert str(Money.of("1250000")) == "Rp1.250.000"

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="negative"):
            Money(Decimal("-1"))

    def test_invalid_amount_rejected(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("lots")

    def test_currency_mismatch(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money.of("1") + Money(Decimal("1"), "USD")


class TestQuantity:

    def test_positive(self):
        assert Quantity(3).value == 3

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="positive"):
            Quantity(0)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="integer"):
            Quantity(True)


class TestPhoneNumber:

    @pytest.mark.parametrize(
        "raw",
        ["081234567890", "6281234567890", "+6281234567890", "0812-3456-7890", "0812 3456 7890"],
    )
    def test_normalized_to_e164(self, raw):
        assert str(PhoneNumber.parse(raw)) == "+6281234567890"

    @pytest.mark.parametrize("raw", ["", "12345", "0212345678", "+4915112345678"])
    def test_invalid_numbers_rejected(self, raw):
        with pytest.raises(ValidationError):
            PhoneNumber.parse(raw)


class TestCustomer:

    def test_name_trimmed_and_address_optional(self):
        customer = Customer.create("  Siti  ", "081234567890", "   ")
        assert customer.name == "Siti"
        assert customer.address is None

    def test_short_name_rejected(self):
        with pytest.raises(ValidationError, match="2-100"):
            Customer.create("A", "081234567890")

    def test_missing_name_rejected(self):
        with pytest.raises(ValidationError, match="name is required"):
            Customer.create("", "081234567890")
