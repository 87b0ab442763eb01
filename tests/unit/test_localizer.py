"""Tests for localized text resolution and language filtering."""

from uiapi.localization.localizer import (
    include_column,
    is_localized_text,
    localize_tree,
    pick_header_lang,
    resolve_text,
    title_case_token,
)
from uiapi.schema.schemas import ColumnDefinition


class TestResolveText:
    """resolve_text fallback order."""

    def test_plain_string_is_returned_as_is(self):
        """A plain string needs no resolution."""
        assert resolve_text("Name", "en") == "Name"

    def test_requested_language_wins(self):
        """The requested language is used when present."""
        assert resolve_text({"en": "Name", "dv": "ނަން"}, "en") == "Name"
        assert resolve_text({"en": "Name", "dv": "ނަން"}, "dv") == "ނަން"

    def test_falls_back_to_dhivehi(self):
        """{dv: 'ނަން'} resolved for en falls back to dv."""
        assert resolve_text({"dv": "ނަން"}, "en") == "ނަން"

    def test_falls_back_to_english_after_dhivehi(self):
        """en is the second fallback."""
        assert resolve_text({"en": "Name", "fr": "Nom"}, "de") == "Name"

    def test_falls_back_to_first_value(self):
        """With no known language the first value is used."""
        assert resolve_text({"fr": "Nom", "de": "Name"}, "en") == "Nom"

    def test_language_code_is_case_insensitive(self):
        """An upper-case request code still matches."""
        assert resolve_text({"en": "Name"}, "EN") == "Name"

    def test_empty_and_none(self):
        """None and an empty mapping resolve to an empty string."""
        assert resolve_text(None, "en") == ""
        assert resolve_text({}, "en") == ""


class TestIncludeColumn:
    """Language filtering of columns."""

    def test_column_without_lang_is_always_included(self):
        """No lang list means every language."""
        column = ColumnDefinition(key="id")
        assert include_column(column, "en")
        assert include_column(column, "dv")

    def test_english_only_column(self):
        """lang ['en'] is present for en and absent for dv."""
        column = ColumnDefinition(key="name_eng", lang=["en"])
        assert include_column(column, "en")
        assert not include_column(column, "dv")

    def test_mapping_customization(self):
        """Customization mappings are filtered the same way."""
        assert include_column({"label": "X", "lang": ["dv"]}, "dv")
        assert not include_column({"label": "X", "lang": ["dv"]}, "en")
        assert include_column({"label": "X"}, "en")

    def test_lang_list_is_case_insensitive(self):
        """'EN' in a lang list matches a request for en."""
        assert include_column({"lang": ["EN"]}, "en")


class TestLocalizeTree:
    """Recursive localization of assembled sections."""

    def test_resolves_nested_localized_values(self):
        """Localized leaves inside mappings and lists are collapsed."""
        tree = {
            "title": {"en": "People", "dv": "މީހުން"},
            "buttons": [{"type": "create", "label": {"en": "New", "dv": "އާ"}}],
        }
        result = localize_tree(tree, "en")
        assert result == {"title": "People", "buttons": [{"type": "create", "label": "New"}]}

    def test_non_language_mappings_are_untouched(self):
        """Mappings keyed by anything other than language codes stay objects."""
        tree = {"displayProps": {"M": {"label": "Male"}}, "layout": {"columns": 3}}
        assert localize_tree(tree, "dv") == tree

    def test_input_is_not_mutated(self):
        """The original tree keeps its localized values."""
        tree = {"title": {"en": "People"}}
        localize_tree(tree, "en")
        assert tree == {"title": {"en": "People"}}

    def test_extra_block_languages_are_recognized(self):
        """Languages declared on a view block count as localized keys."""
        tree = {"title": {"ar": "ناس", "en": "People"}}
        assert localize_tree(tree, "ar", languages=["ar"]) == {"title": "ناس"}

    def test_undeclared_languages_do_not_block_resolution(self):
        """A label carrying a language outside the block's list is still collapsed."""
        tree = {"fields": [{"label": {"en": "Name", "dv": "N", "ar": "A"}}]}
        assert localize_tree(tree, "en", languages=["en", "dv"]) == {"fields": [{"label": "Name"}]}

    def test_label_with_only_unknown_languages(self):
        """A label or title position resolves any language-code mapping."""
        tree = {"label": {"ar": "A"}, "meta": {"ar": "A"}}
        assert localize_tree(tree, "en") == {"label": "A", "meta": {"ar": "A"}}


class TestHelpers:
    """Small helpers."""

    def test_is_localized_text(self):
        """Mappings of language codes to strings with at least one known language qualify."""
        assert is_localized_text({"en": "A", "dv": "B"})
        assert is_localized_text({"en": "A", "dv": "B", "ar": "C"})
        assert is_localized_text({"zh-Hans": "A", "dv": "B"})
        assert not is_localized_text({"ar": "C"})
        assert not is_localized_text({"en": "A", "dv": {"nested": "B"}})
        assert not is_localized_text({"en": "A", "color": "red"})
        assert not is_localized_text({})
        assert not is_localized_text("A")

    def test_title_case_token(self):
        """Tokens become readable titles; relation tokens use the field part."""
        assert title_case_token("first_name") == "First Name"
        assert title_case_token("country.name_eng") == "Name Eng"


class TestPickHeaderLang:
    """Per-header language hints."""

    def test_no_declared_languages(self):
        """Columns without a lang list get no hint."""
        assert pick_header_lang(None, "en") is None
        assert pick_header_lang([], "en") is None

    def test_only_the_request_language(self):
        """A column supporting only the request language has nothing to offer."""
        assert pick_header_lang(["en"], "en") is None
        assert pick_header_lang(["EN", "en"], "en") is None

    def test_english_and_dhivehi_pair(self):
        """en hints dv and dv hints en."""
        assert pick_header_lang(["en", "dv"], "en") == "dv"
        assert pick_header_lang(["en", "dv"], "DV") == "en"

    def test_other_language_is_first_remaining(self):
        """Without the en/dv pair the first other language is offered."""
        assert pick_header_lang(["ar", "en", "fr"], "en") == "ar"

    def test_request_language_not_supported(self):
        """en, then dv, then the first declared language."""
        assert pick_header_lang(["dv", "en"], "ar") == "en"
        assert pick_header_lang(["fr", "dv"], "ar") == "dv"
        assert pick_header_lang(["fr", "de"], "ar") == "fr"
