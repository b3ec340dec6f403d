"""Tests for server-side sanitization and validation of order requests."""

import json

import pytest
from ordering.order.intake import (
    MAX_ITEMS,
    clamp_amount,
    clamp_quantity,
    clean_order_request,
    is_valid_email,
    is_valid_phone,
    normalize_channel,
    normalize_payment_method,
    sanitize,
)
from protean.exceptions import ValidationError


def _request(**overrides):
    data = {
        "customer_name": "Jane Wanjiku",
        "customer_phone": "0712345678",
        "customer_email": "jane@example.com",
        "delivery_address": "Moi Avenue, Nairobi",
        "delivery_location_id": "loc-cbd",
        "items": [
            {
                "product_id": "prod-dress",
                "product_name": "Linen Dress",
                "quantity": 2,
                "unit_price": 1000,
                "total_price": 2000,
            }
        ],
        "subtotal": 2000,
        "delivery_fee": 200,
        "total": 2200,
        "ordered_via": "website",
        "payment_method": "cod",
    }
    data.update(overrides)
    return data


class TestSanitize:
    def test_strips_tags(self):
        assert sanitize("<b>Jane</b> Wanjiku") == "Jane Wanjiku"

    def test_strips_unsafe_characters(self):
        assert sanitize("O'Brien; \"Jr\"") == "OBrien Jr"

    def test_truncates(self):
        assert sanitize("x" * 50, max_length=10) == "x" * 10

    def test_non_string_becomes_empty(self):
        assert sanitize(None) == ""
        assert sanitize(42) == ""


class TestContactValidation:
    @pytest.mark.parametrize("phone", ["0712345678", "0112345678", "+254712345678", "254 712 345 678", "(0712) 345-678"])
    def test_valid_kenyan_phones(self, phone):
        assert is_valid_phone(phone)

    @pytest.mark.parametrize("phone", ["12345", "0812345678", "07123456789", "+1 555 123 4567"])
    def test_invalid_phones(self, phone):
        assert not is_valid_phone(phone)

    def test_email(self):
        assert is_valid_email("jane@example.com")
        assert not is_valid_email("jane@example")
        assert not is_valid_email("jane example.com")


class TestClamping:
    def test_amounts_never_negative(self):
        assert clamp_amount(-50) == 0.0
        assert clamp_amount("abc") == 0.0
        assert clamp_amount(float("nan")) == 0.0
        assert clamp_amount("1500.5") == 1500.5

    def test_quantity_bounds(self):
        assert clamp_quantity(0) == 1
        assert clamp_quantity(500) == 100
        assert clamp_quantity(2.9) == 2
        assert clamp_quantity("oops") == 1

    def test_enumerations_fall_back(self):
        assert normalize_payment_method("bitcoin") == "cod"
        assert normalize_payment_method("mpesa") == "mpesa"
        assert normalize_channel("fax") == "website"
        assert normalize_channel("whatsapp") == "whatsapp"


class TestCleanOrderRequest:
    def test_valid_request(self):
        cleaned = clean_order_request(_request())

        assert cleaned["customer_name"] == "Jane Wanjiku"
        assert cleaned["customer_email"] == "jane@example.com"
        assert cleaned["delivery_location_id"] == "loc-cbd"
        assert cleaned["total"] == 2200.0
        assert cleaned["items"][0]["total_price"] == 2000.0
        assert cleaned["mpesa"] == {"code": None, "phone": None, "message": None}

    def test_item_total_is_recomputed(self):
        items = [{"product_id": "p1", "product_name": "Scarf", "quantity": 3, "unit_price": 450, "total_price": 1}]
        cleaned = clean_order_request(_request(items=items))
        assert cleaned["items"][0]["total_price"] == 1350.0

    def test_items_may_arrive_as_json(self):
        items = json.dumps([{"product_id": "p1", "product_name": "Scarf", "quantity": 1, "unit_price": 450}])
        cleaned = clean_order_request(_request(items=items))
        assert cleaned["items"][0]["product_name"] == "Scarf"

    def test_missing_fields_are_reported_together(self):
        with pytest.raises(ValidationError) as exc:
            clean_order_request(_request(customer_name="  ", customer_phone="", delivery_address="<p></p>", items=[]))

        assert {"customer_name", "customer_phone", "delivery_address", "items"} <= set(exc.value.messages)

    def test_invalid_phone(self):
        with pytest.raises(ValidationError) as exc:
            clean_order_request(_request(customer_phone="12345"))
        assert "customer_phone" in exc.value.messages

    def test_invalid_email(self):
        with pytest.raises(ValidationError) as exc:
            clean_order_request(_request(customer_email="not-an-email"))
        assert "customer_email" in exc.value.messages

    def test_email_is_optional(self):
        cleaned = clean_order_request(_request(customer_email=""))
        assert cleaned["customer_email"] is None

    def test_too_many_items(self):
        item = {"product_id": "p1", "product_name": "Scarf", "quantity": 1, "unit_price": 450}
        with pytest.raises(ValidationError) as exc:
            clean_order_request(_request(items=[item] * (MAX_ITEMS + 1)))
        assert "items" in exc.value.messages

    def test_malformed_items_json(self):
        with pytest.raises(ValidationError) as exc:
            clean_order_request(_request(items="[not json"))
        assert "items" in exc.value.messages

    def test_item_without_name(self):
        with pytest.raises(ValidationError):
            clean_order_request(_request(items=[{"product_id": "p1", "quantity": 1, "unit_price": 10}]))

    def test_mpesa_details_are_sanitized(self):
        cleaned = clean_order_request(
            _request(
                payment_method="mpesa",
                ordered_via="mpesa",
                mpesa_code="QFT4XY7ZAB<script>",
                mpesa_phone="254712345678",
                mpesa_message="QFT4XY7ZAB Confirmed.",
            )
        )
        assert cleaned["mpesa"]["code"] == "QFT4XY7ZAB"
        assert cleaned["payment_method"] == "mpesa"
        assert cleaned["ordered_via"] == "mpesa"
