"""Add/remove rules for service category sets."""

import pytest

from pro_directory_api.app.core.exceptions import (
    CannotRemovePrimary,
    CategoryNotFound,
    DuplicateCategory,
    InvalidAccountState,
    InvalidCategory,
)
from pro_directory_api.app.services.category_service import (
    ServiceCategorySet,
    SimilarCategoryWarning,
    add_service,
    find_similar,
    is_similar,
    remove_service,
)


@pytest.fixture
def electrician():
    return ServiceCategorySet("Electrician")


class TestServiceCategorySet:
    def test_all_categories_primary_first(self):
        categories = ServiceCategorySet("Electrician", frozenset({"Plumber", "HVAC Technician"}))

        assert categories.all_categories() == ("Electrician", "HVAC Technician", "Plumber")
        assert categories.additional_count == 2
        assert categories.total_count == 3

    def test_contains(self):
        categories = ServiceCategorySet("Electrician", frozenset({"Plumber"}))

        assert "Electrician" in categories
        assert "Plumber" in categories
        assert "Locksmith" not in categories

    @pytest.mark.parametrize(
        "categories",
        [
            ServiceCategorySet(""),
            ServiceCategorySet("   "),
            ServiceCategorySet("Electrician", frozenset({"Electrician"})),
            ServiceCategorySet("Electrician", frozenset({" "})),
        ],
    )
    def test_validate_rejects_broken_sets(self, categories):
        with pytest.raises(InvalidAccountState):
            categories.validate()


class TestAddService:
    def test_adds_category(self, electrician):
        result = add_service(electrician, "Plumber")

        assert isinstance(result, ServiceCategorySet)
        assert result.additional == frozenset({"Plumber"})
        assert electrician.additional == frozenset()

    def test_strips_whitespace(self, electrician):
        result = add_service(electrician, "  Plumber ")

        assert result.additional == frozenset({"Plumber"})

    def test_primary_is_duplicate(self, electrician):
        with pytest.raises(DuplicateCategory) as exc_info:
            add_service(electrician, "Electrician")

        assert exc_info.value.category == "Electrician"

    def test_additional_is_duplicate(self):
        categories = ServiceCategorySet("Electrician", frozenset({"Plumber"}))

        with pytest.raises(DuplicateCategory):
            add_service(categories, "Plumber")

    def test_duplicate_wins_over_accept_similar(self):
        categories = ServiceCategorySet("Electrician", frozenset({"Plumber"}))

        with pytest.raises(DuplicateCategory):
            add_service(categories, "Plumber", accept_similar=True)

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_category_rejected(self, electrician, name):
        with pytest.raises(InvalidCategory):
            add_service(electrician, name)

    def test_plural_returns_warning(self):
        categories = ServiceCategorySet("Electrician", frozenset({"Plumber"}))

        result = add_service(categories, "Plumbers")

        assert isinstance(result, SimilarCategoryWarning)
        assert result.candidate == "Plumbers"
        assert result.similar_to == ("Plumber",)
        assert "Plumber" in result.message

    def test_similar_to_primary_returns_warning(self):
        result = add_service(ServiceCategorySet("General Contractor"), "Contractor")

        assert isinstance(result, SimilarCategoryWarning)
        assert result.similar_to == ("General Contractor",)

    def test_accept_similar_adds(self):
        categories = ServiceCategorySet("Electrician", frozenset({"Plumber"}))

        result = add_service(categories, "Plumbers", accept_similar=True)

        assert result.additional == frozenset({"Plumber", "Plumbers"})

    def test_invalid_set_rejected(self):
        with pytest.raises(InvalidAccountState):
            add_service(ServiceCategorySet(""), "Plumber")


class TestSimilarity:
    @pytest.mark.parametrize(
        "existing, candidate",
        [
            ("Contractor", "Contractors"),
            ("Contractors", "Contractor"),
            ("Plumber", "plumber"),
            ("General Contractor", "contractor"),
            ("Solar Installer", "Solar"),
        ],
    )
    def test_similar(self, existing, candidate):
        assert is_similar(existing, candidate)

    @pytest.mark.parametrize(
        "existing, candidate",
        [
            ("Plumber", "Plumber"),
            ("Electrician", "Electrical Contractor"),
            ("HVAC Technician", "Plumber"),
        ],
    )
    def test_not_similar(self, existing, candidate):
        assert not is_similar(existing, candidate)

    def test_find_similar_keeps_order(self):
        assert find_similar(["Roofer", "Solar Installer", "Solar Designer"], "Solar") == (
            "Solar Installer",
            "Solar Designer",
        )


class TestRemoveService:
    def test_removes_additional(self):
        categories = ServiceCategorySet("Electrician", frozenset({"Plumber", "HVAC Technician"}))

        result = remove_service(categories, "Plumber")

        assert result.additional == frozenset({"HVAC Technician"})
        assert result.primary == "Electrician"

    @pytest.mark.parametrize("additional", [frozenset(), frozenset({"Plumber"}), frozenset({"A", "B", "C"})])
    def test_primary_cannot_be_removed(self, additional):
        with pytest.raises(CannotRemovePrimary):
            remove_service(ServiceCategorySet("Electrician", additional), "Electrician")

    def test_unknown_category(self, electrician):
        with pytest.raises(CategoryNotFound):
            remove_service(electrician, "Plumber")

    def test_add_then_remove_restores_set(self, electrician):
        added = add_service(electrician, "Plumber")

        assert remove_service(added, "Plumber") == electrician
