"""Unit tests for semantic classification."""

import json
from pathlib import Path

import pytest

from dreamverse.models import ElementType, SemanticCategory
from dreamverse.universe.categories import (
    DEFAULT_CATEGORY_TABLE,
    CategoryTableError,
    SemanticClassifier,
    classify,
    get_classifier,
)


class TestClassify:
    """Tests for keyword and fallback classification."""

    @pytest.fixture
    def classifier(self) -> SemanticClassifier:
        return SemanticClassifier()

    def test_keyword_match(self, classifier: SemanticClassifier) -> None:
        """Test substring keyword matches."""
        assert classifier.classify("mother", ElementType.PERSON) == SemanticCategory.FAMILY
        assert classifier.classify("river", ElementType.PLACE) == SemanticCategory.NATURE
        assert classifier.classify("train", ElementType.OBJECT) == SemanticCategory.VEHICLES
        assert classifier.classify("old friend", ElementType.PERSON) == SemanticCategory.FRIENDS

    def test_short_stems_do_not_match_inside_words(self, classifier: SemanticClassifier) -> None:
        """Test common names containing short stems keep their own category."""
        assert classifier.classify("street", ElementType.PLACE) == SemanticCategory.BUILDINGS
        assert classifier.classify("Spain", ElementType.PLACE) == SemanticCategory.BUILDINGS
        assert classifier.classify("crossing", ElementType.PLACE) == SemanticCategory.BUILDINGS
        assert classifier.classify("window", ElementType.OBJECT) == SemanticCategory.OTHER
        assert classifier.classify("painting", ElementType.OBJECT) == SemanticCategory.OTHER
        assert classifier.classify("glove", ElementType.OBJECT) == SemanticCategory.OTHER
        assert classifier.classify("small boat", ElementType.OBJECT) == SemanticCategory.VEHICLES
        assert classifier.classify("transparent vase", ElementType.OBJECT) == SemanticCategory.OTHER

    def test_longer_forms_still_match(self, classifier: SemanticClassifier) -> None:
        """Test the lengthened English keywords."""
        assert classifier.classify("tall trees", ElementType.PLACE) == SemanticCategory.NATURE
        assert classifier.classify("painful goodbye", ElementType.ACTION) == SemanticCategory.EMOTIONS
        assert classifier.classify("running late", ElementType.ACTION) == SemanticCategory.ACTIONS
        assert classifier.classify("singing", ElementType.ACTION) == SemanticCategory.ACTIONS

    def test_case_insensitive(self, classifier: SemanticClassifier) -> None:
        """Test matching ignores case."""
        assert classifier.classify("My MOTHER's coat", ElementType.OBJECT) == SemanticCategory.FAMILY

    def test_chinese_keywords(self, classifier: SemanticClassifier) -> None:
        """Test built-in Chinese keywords."""
        assert classifier.classify("妈妈", ElementType.PERSON) == SemanticCategory.FAMILY
        assert classifier.classify("火车", ElementType.OBJECT) == SemanticCategory.VEHICLES

    def test_first_category_wins(self, classifier: SemanticClassifier) -> None:
        """Test table order decides between several matches."""
        assert classifier.classify("mother by the river", ElementType.PLACE) == SemanticCategory.FAMILY

    def test_type_fallback(self, classifier: SemanticClassifier) -> None:
        """Test fallback by element type when nothing matches."""
        assert classifier.classify("Zorblax", ElementType.PERSON) == SemanticCategory.STRANGERS
        assert classifier.classify("Zorblax", ElementType.PLACE) == SemanticCategory.BUILDINGS
        assert classifier.classify("Zorblax", ElementType.OBJECT) == SemanticCategory.OTHER
        assert classifier.classify("Zorblax", ElementType.ACTION) == SemanticCategory.ACTIONS

    def test_unknown_type_falls_back_to_other(self, classifier: SemanticClassifier) -> None:
        """Test unknown types land in other."""
        assert classifier.classify("Zorblax", "creature") == SemanticCategory.OTHER
        assert classifier.classify("", "creature") == SemanticCategory.OTHER

    def test_plain_string_type(self, classifier: SemanticClassifier) -> None:
        """Test types may be given as plain strings."""
        assert classifier.classify("Zorblax", "place") == SemanticCategory.BUILDINGS

    def test_deterministic(self, classifier: SemanticClassifier) -> None:
        """Test repeated calls give the same valid category."""
        names = ["mother", "ticket", "umbrella", "sunset walk", "Zorblax", "梦"]
        for name in names:
            results = {classifier.classify(name, ElementType.OBJECT) for _ in range(5)}
            assert len(results) == 1
            assert results.pop() in set(SemanticCategory)

    def test_module_classify_uses_default_table(self) -> None:
        """Test module-level helper."""
        assert classify("father", ElementType.PERSON) == SemanticCategory.FAMILY
        assert classify("ticket", ElementType.OBJECT) == SemanticCategory.OTHER


class TestCategoryTable:
    """Tests for the swappable category table."""

    def test_default_table_complete(self) -> None:
        """Test every category has presentation data."""
        assert set(DEFAULT_CATEGORY_TABLE) == set(SemanticCategory)
        assert DEFAULT_CATEGORY_TABLE[SemanticCategory.OTHER].keywords == ()

    def test_to_dict(self) -> None:
        """Test serialized table lists every category."""
        data = SemanticClassifier().to_dict()
        assert len(data) == 11
        assert data["family"]["label"] == "Family"
        assert "mother" in data["family"]["keywords"]

    def test_from_dict(self) -> None:
        """Test replacement table changes matching."""
        classifier = SemanticClassifier.from_dict({"food": {"keywords": ["pizza"]}})
        assert classifier.classify("pizza night", ElementType.OBJECT) == SemanticCategory.FOOD
        # family is absent from the replacement table
        assert classifier.classify("mother", ElementType.PERSON) == SemanticCategory.STRANGERS
        assert classifier.config(SemanticCategory.FAMILY).label == "Family"

    def test_from_dict_keeps_defaults_for_missing_fields(self) -> None:
        """Test partial entries inherit presentation fields."""
        classifier = SemanticClassifier.from_dict({"nature": {"color": "#000000"}})
        config = classifier.config(SemanticCategory.NATURE)
        assert config.color == "#000000"
        assert config.label == "Nature"
        assert "river" in config.keywords

    def test_unknown_category_rejected(self) -> None:
        """Test unknown category names raise."""
        with pytest.raises(CategoryTableError, match="Unknown semantic category"):
            SemanticClassifier.from_dict({"pets": {"keywords": ["dog"]}})

    def test_malformed_keywords_rejected(self) -> None:
        """Test keywords must be a list of strings."""
        with pytest.raises(CategoryTableError):
            SemanticClassifier.from_dict({"food": {"keywords": "pizza"}})
        with pytest.raises(CategoryTableError):
            SemanticClassifier.from_dict({"food": ["pizza"]})
        with pytest.raises(CategoryTableError):
            SemanticClassifier.from_dict(["food"])  # type: ignore[arg-type]

    def test_error_is_value_error(self) -> None:
        """Test the table error is a ValueError."""
        assert issubclass(CategoryTableError, ValueError)

    def test_from_file(self, tmp_path: Path) -> None:
        """Test loading a table from JSON."""
        path = tmp_path / "categories.json"
        path.write_text(json.dumps({"vehicles": {"keywords": ["rocket"]}}), encoding="utf-8")
        classifier = get_classifier(path)
        assert classifier.classify("red rocket", ElementType.OBJECT) == SemanticCategory.VEHICLES

    def test_from_file_errors(self, tmp_path: Path) -> None:
        """Test missing and invalid files raise CategoryTableError."""
        with pytest.raises(CategoryTableError):
            SemanticClassifier.from_file(tmp_path / "missing.json")

        broken = tmp_path / "broken.json"
        broken.write_text("{not json", encoding="utf-8")
        with pytest.raises(CategoryTableError):
            SemanticClassifier.from_file(broken)

    def test_get_classifier_default(self) -> None:
        """Test no path gives the built-in table."""
        assert get_classifier(None).table == DEFAULT_CATEGORY_TABLE
