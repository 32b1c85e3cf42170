# Overview: Pytest coverage for the shared validation rules (phones, carts, settings patches).

import pytest

from barberpro.errors import ValidationError
from barberpro.validation import is_valid_phone, merge_settings, validate_settings_patch, validate_transaction


def sale(**overrides):
    payload = {
        "id": "TX-1",
        "items": [{"item_id": "S-1", "type": "service", "name": "Fade", "price_cents": 800, "quantity": 1}],
        "total_cents": 800,
        "payment_method": "Cash",
    }
    payload.update(overrides)
    return payload


def with_item(**overrides):
    item = dict(sale()["items"][0])
    item.update(overrides)
    return sale(items=[item])


@pytest.mark.parametrize("phone", ["0712345678", "0112345678", "+254712345678", "712345678", "0712 345-678"])
def test_kenyan_phone_formats_accepted(phone):
    assert is_valid_phone(phone)


@pytest.mark.parametrize("phone", ["", None, "12345", "0812345678", "+255712345678", "07123456789"])
def test_bad_phones_rejected(phone):
    assert not is_valid_phone(phone)


class TestTransactionRules:
    def test_valid_sale(self):
        assert validate_transaction(sale()) is None

    @pytest.mark.parametrize("payload,reason", [
        (sale(items=[]), "Cart is empty"),
        (sale(id=""), "Transaction id is required"),
        (with_item(quantity=0), "quantity must be at least 1"),
        (with_item(type="voucher"), "type must be"),
        (with_item(price_cents=True), "price_cents must be a non-negative integer"),
        (sale(total_cents=-1), "total_cents"),
        (sale(payment_method="Cheque"), "payment_method"),
        (sale(mpesa_phone_number="999"), "Invalid M-Pesa phone number"),
        (sale(timestamp="yesterday"), "ISO-8601"),
    ])
    def test_rejections(self, payload, reason):
        assert reason in validate_transaction(payload)

    def test_commission_splits_cannot_exceed_whole(self):
        splits = [{"staff_id": "A", "percentage": 60}, {"staff_id": "B", "percentage": 50}]
        assert "exceed 100%" in validate_transaction(with_item(commission_splits=splits))

    def test_commission_splits_summing_to_whole(self):
        splits = [{"staff_id": "A", "percentage": 60}, {"staff_id": "B", "percentage": 40}]
        assert validate_transaction(with_item(commission_splits=splits)) is None


class TestSettingsPatch:
    @pytest.mark.parametrize("partial", [{}, None, {"theme": {}}, {"payment": "yes"}])
    def test_rejected(self, partial):
        with pytest.raises(ValidationError):
            validate_settings_patch(partial)

    def test_merge_keeps_untouched_keys(self):
        current = {"payment": {"accept_cash": True, "accept_split": False}}
        merged = merge_settings(current, {"payment": {"accept_split": True}})
        assert merged["payment"] == {"accept_cash": True, "accept_split": True}
