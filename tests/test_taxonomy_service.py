"""Taxonomy lookups over the packaged and injected reference data."""

import pytest

from pro_directory_api.app.services.taxonomy_service import (
    TaxonomyService,
    get_taxonomy_service,
    load_default_taxonomy,
)


@pytest.fixture(scope="module")
def taxonomy():
    return TaxonomyService(load_default_taxonomy())


class TestDefaultTaxonomy:
    def test_sections_in_display_order(self, taxonomy):
        assert taxonomy.sections() == ("Build Home", "Design Home", "Finance & Real Estate")

    def test_categories(self, taxonomy):
        categories = taxonomy.categories("Build Home")

        assert categories[0] == "Construction & Building"
        assert "MEP (Mechanical, Electrical, Plumbing)" in categories

    def test_subcategories_keep_order(self, taxonomy):
        assert taxonomy.get_subcategories("Build Home", "MEP (Mechanical, Electrical, Plumbing)") == (
            "HVAC Technician",
            "Electrician",
            "Plumber",
        )

    def test_every_leaf_is_non_empty(self, taxonomy):
        for section in taxonomy.sections():
            for category in taxonomy.categories(section):
                leaves = taxonomy.get_subcategories(section, category)
                assert leaves
                assert all(leaf.strip() for leaf in leaves)

    @pytest.mark.parametrize(
        "section, category",
        [("Build Home", "Astronaut"), ("Moon Home", "Architect"), ("", "")],
    )
    def test_unknown_lookup_is_empty(self, taxonomy, section, category):
        assert taxonomy.get_subcategories(section, category) == ()

    def test_unknown_section_has_no_categories(self, taxonomy):
        assert taxonomy.categories("Moon Home") == ()

    def test_contains_leaf(self, taxonomy):
        assert taxonomy.contains_leaf(" Loan Officer ")
        assert not taxonomy.contains_leaf("Astronaut")

    def test_shared_service_is_cached(self):
        assert get_taxonomy_service() is get_taxonomy_service()


class TestInjectedTaxonomy:
    def test_uses_given_mapping(self):
        taxonomy = TaxonomyService({"Garden": {"Trees": ["Arborist", "Tree Surgeon"]}})

        assert taxonomy.sections() == ("Garden",)
        assert taxonomy.get_subcategories("Garden", "Trees") == ("Arborist", "Tree Surgeon")

    def test_loads_json_file(self, tmp_path):
        path = tmp_path / "taxonomy.json"
        path.write_text('{"Garden": {"Trees": ["Arborist"]}}', encoding="utf-8")

        assert load_default_taxonomy(path) == {"Garden": {"Trees": ("Arborist",)}}
