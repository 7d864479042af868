"""Record adapter: every stored or legacy spelling maps to one canonical account."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from pro_directory_api.app.schemas.account import (
    AccountCreate,
    AccountRead,
    ProfessionalAccount,
    account_from_record,
    parse_category_list,
    parse_money,
)


class TestParseCategoryList:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, []),
            ("", []),
            ("{}", []),
            (["Plumber", None, "Locksmith"], ["Plumber", "Locksmith"]),
            ('["Plumber", "HVAC Technician"]', ["Plumber", "HVAC Technician"]),
            ('{Plumber,"HVAC Technician"}', ["Plumber", "HVAC Technician"]),
            ('{"Window & Door Installer",NULL}', ["Window & Door Installer"]),
            ("Plumber", ["Plumber"]),
        ],
    )
    def test_representations(self, value, expected):
        assert parse_category_list(value) == expected

    def test_malformed_json_rejected(self):
        with pytest.raises(ValueError):
            parse_category_list('["a"')

    def test_unsupported_type_rejected(self):
        with pytest.raises(ValueError):
            parse_category_list(42)


class TestParseMoney:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("34.77", Decimal("34.77")),
            ("$1,034.77", Decimal("1034.77")),
            (34.77, Decimal("34.77")),
            (29, Decimal("29")),
            (Decimal("5.00"), Decimal("5.00")),
        ],
    )
    def test_amounts(self, value, expected):
        assert parse_money(value) == expected

    @pytest.mark.parametrize("value", [None, "", "  "])
    def test_empty_is_none(self, value):
        assert parse_money(value) is None

    def test_invalid_amount(self):
        with pytest.raises(ValueError):
            parse_money("about ten dollars")


class TestAccountFromRecord:
    def test_camel_and_snake_case_agree(self):
        camel = account_from_record(
            {
                "id": 7,
                "username": "sparky",
                "businessName": "Sparky Electric",
                "isProfessional": True,
                "serviceCategory": "Electrician",
                "additionalServiceCategories": ["Plumber"],
                "totalMonthlyFee": "34.77",
                "subscriptionStatus": "active",
                "stripeCustomerId": "cus_1",
            }
        )
        snake = account_from_record(
            {
                "id": 7,
                "username": "sparky",
                "business_name": "Sparky Electric",
                "is_professional": 1,
                "primary_service_category": "Electrician",
                "additional_service_categories": '["Plumber"]',
                "monthly_fee": "34.77",
                "subscription_status": "active",
                "stripe_customer_id": "cus_1",
            }
        )

        assert camel == snake
        assert camel.monthly_fee == Decimal("34.77")

    def test_postgres_array_literal(self):
        account = account_from_record(
            {
                "username": "sparky",
                "primary_service_category": "Electrician",
                "additional_service_categories": '{"HVAC Technician",Plumber}',
            }
        )

        assert account.additional_service_categories == ("HVAC Technician", "Plumber")

    def test_first_legacy_category_becomes_primary(self):
        account = account_from_record({"username": "sparky", "serviceCategories": ["Electrician", "Plumber"]})

        assert account.primary_service_category == "Electrician"
        assert account.additional_service_categories == ("Plumber",)

    def test_primary_removed_from_additional(self):
        account = account_from_record(
            {
                "username": "sparky",
                "primaryServiceCategory": "Electrician",
                "additionalServiceCategories": ["Electrician", "Plumber", "Plumber", " "],
            }
        )

        assert account.additional_service_categories == ("Plumber",)

    def test_non_professional_keeps_empty_primary(self):
        account = account_from_record({"username": "guest", "isProfessional": False, "serviceCategories": ["X"]})

        assert account.primary_service_category == ""

    def test_defaults(self):
        account = account_from_record({"username": "sparky", "subscription_status": None})

        assert account.subscription_status == "trial"
        assert account.monthly_fee is None
        assert account.version == 0

    def test_invalid_fee_rejected(self):
        with pytest.raises(ValidationError):
            account_from_record({"username": "sparky", "monthlyFee": "ten"})

    def test_category_set(self):
        account = ProfessionalAccount(
            username="sparky",
            primary_service_category="Electrician",
            additional_service_categories=("Plumber",),
        )

        assert account.category_set.all_categories() == ("Electrician", "Plumber")


class TestAccountCreate:
    def test_strips_fields(self):
        data = AccountCreate(username=" sparky ", primary_service_category=" Electrician ")

        assert data.username == "sparky"
        assert data.primary_service_category == "Electrician"

    def test_blank_primary_rejected(self):
        with pytest.raises(ValidationError):
            AccountCreate(username="sparky", primary_service_category="   ")

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            AccountCreate(username="sparky", primary_service_category="Electrician", subscription_status="gold")


class TestAccountRead:
    def test_service_categories_lists_primary_first(self):
        account = ProfessionalAccount(
            id=1,
            username="sparky",
            primary_service_category="Electrician",
            additional_service_categories=["Plumber", "HVAC Technician"],
            monthly_fee="39.77",
        )

        read = AccountRead.from_account(account)

        assert read.service_categories == ["Electrician", "HVAC Technician", "Plumber"]
        assert read.additional_service_categories == ["HVAC Technician", "Plumber"]
        assert read.monthly_fee == Decimal("39.77")
