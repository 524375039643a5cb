"""Unit tests for the locator language."""

from __future__ import annotations

import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from mp_finder.kernel.errors import LocatorProcessError, OperationError
from mp_finder.kernel.locator import (
    ANY_LITERAL,
    HELP_DIMENSION,
    Locator,
    LocatorOptions,
    StringPool,
    get_boolean_allowing_any,
    get_strict_boolean,
    get_string_locator,
    render_value,
    set_dimension,
    set_dimension_if_not_present,
)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParsing:
    def test_single_value(self) -> None:
        locator = Locator("12345")
        assert locator.is_single_value()
        assert locator.get_single_value() == "12345"
        assert locator.get_single_value_as_long() == 12345

    def test_text_without_colon_is_single_value(self) -> None:
        locator = Locator("Frodo Baggins")
        assert locator.is_single_value()
        assert locator.get_dimensions_count() == 0

    def test_parenthesised_text_is_escaped_single_value(self) -> None:
        locator = Locator("(name:x)")
        assert locator.is_single_value()
        assert locator.get_single_value() == "name:x"

    def test_dimensions(self) -> None:
        locator = Locator("name:Frodo,age:14", "name", "age")
        assert not locator.is_single_value()
        assert locator.get_single_dimension_value("name") == "Frodo"
        assert locator.get_single_dimension_value_as_long("age") == 14
        locator.check_locator_fully_processed()

    def test_complex_value_keeps_delimiters(self) -> None:
        locator = Locator("text:(Freaking symbols:,name),id:1")
        assert locator.get_single_dimension_value("text") == "Freaking symbols:,name"
        assert locator.get_single_dimension_value("id") == "1"

    def test_nested_locator(self) -> None:
        locator = Locator("buildType:(name:5,project:(id:Project_1))")
        nested = locator.get_nested("buildType")
        assert nested is not None
        assert nested.get_single_dimension_value("name") == "5"
        project = nested.get_nested("project")
        assert project is not None
        assert project.get_single_dimension_value("id") == "Project_1"

    def test_nested_absent_dimension(self) -> None:
        assert Locator("a:1").get_nested("b") is None

    def test_repeated_dimension_collects_values_last_wins(self) -> None:
        locator = Locator("tag:a,tag:b")
        assert locator.get_dimension_value("tag") == ["a", "b"]
        assert locator.get_single_dimension_value("tag") == "b"

    def test_any_value(self) -> None:
        locator = Locator("branch:$any")
        assert locator.get_single_dimension_value("branch") is None
        assert locator.lookup_dimension_value("branch") == [ANY_LITERAL]
        assert locator.is_any_present("branch")

    def test_parenthesised_any_is_literal(self) -> None:
        assert Locator("branch:($any)").get_single_dimension_value("branch") == "$any"

    def test_empty_value(self) -> None:
        assert Locator("name:").get_single_dimension_value("name") == ""

    def test_absent_dimension_returns_default(self) -> None:
        locator = Locator("a:1")
        assert locator.get_single_dimension_value("b") is None
        assert locator.get_single_dimension_value_as_long("b", 7) == 7

    def test_base64_value(self) -> None:
        locator = Locator("x:($base64:YSli)")
        assert locator.get_single_dimension_value("x") == "a)b"

    def test_base64_disabled(self) -> None:
        options = LocatorOptions(allow_base64=False)
        locator = Locator("x:($base64:YSli)", options=options)
        assert locator.get_single_dimension_value("x") == "$base64:YSli"

    def test_wrapped_base64_single_value(self) -> None:
        assert Locator("($base64:YSli)").get_single_value() == "a)b"

    def test_wrapped_base64_single_value_disabled(self) -> None:
        locator = Locator("($base64:YSli)", options=LocatorOptions(allow_base64=False))
        assert locator.get_single_value() == "$base64:YSli"

    def test_extended_mode_valueless_dimensions(self) -> None:
        locator = Locator("id,build-type,project(id)", options=LocatorOptions(extended=True))
        assert locator.defined_dimensions == ["id", "build-type", "project"]
        assert locator.get_single_dimension_value("id") == ""
        assert locator.get_single_dimension_value("project") == "id"


class TestParsingErrors:
    def test_empty_text(self) -> None:
        with pytest.raises(LocatorProcessError, match="Cannot be empty"):
            Locator("")

    def test_missing_name(self) -> None:
        with pytest.raises(LocatorProcessError, match="Could not find dimension name"):
            Locator(":x")

    def test_invalid_name(self) -> None:
        with pytest.raises(LocatorProcessError, match="Invalid dimension name"):
            Locator("na me:x")

    def test_unbalanced_parentheses(self) -> None:
        with pytest.raises(LocatorProcessError, match="Could not find matching") as exc_info:
            Locator("name:(abc")
        assert exc_info.value.position == 6
        assert exc_info.value.locator == "name:(abc"
        assert "at position 6" in exc_info.value.message

    def test_text_after_complex_value(self) -> None:
        with pytest.raises(LocatorProcessError, match="No dimensions delimiter"):
            Locator("name:(a)b")

    def test_known_name_may_contain_symbols(self) -> None:
        locator = Locator("$reportErrorOnNothingFound:true", "$reportErrorOnNothingFound")
        assert locator.get_single_dimension_value_as_strict_boolean("$reportErrorOnNothingFound") is True

    def test_bad_number(self) -> None:
        with pytest.raises(LocatorProcessError, match="Should be a number"):
            Locator("count:ten").get_single_dimension_value_as_long("count")


# ---------------------------------------------------------------------------
# Consumption tracking
# ---------------------------------------------------------------------------


class TestFullyProcessed:
    def test_unknown_dimension_is_reported(self) -> None:
        locator = Locator("name:Frodo,bogus:1", "id", "name")
        locator.get_single_dimension_value("name")
        with pytest.raises(LocatorProcessError, match=r"Locator dimension \[bogus\] is unknown") as exc_info:
            locator.check_locator_fully_processed()
        assert exc_info.value.dimensions == ["bogus"]
        assert "Supported dimensions are: [id, name]" in exc_info.value.message

    def test_known_but_ignored_dimension(self) -> None:
        locator = Locator("name:Frodo,id:1", "id", "name")
        locator.get_single_dimension_value("name")
        with pytest.raises(LocatorProcessError, match="known but was ignored"):
            locator.check_locator_fully_processed()

    def test_nothing_used(self) -> None:
        locator = Locator("name:Frodo", "name")
        with pytest.raises(LocatorProcessError, match="no dimensions are used"):
            locator.check_locator_fully_processed()

    def test_several_unused(self) -> None:
        locator = Locator("a:1,b:2,c:3", "a", "b")
        locator.get_single_dimension_value("a")
        with pytest.raises(LocatorProcessError, match=r"\[b\] is ignored and \[c\] is unknown"):
            locator.check_locator_fully_processed()

    def test_single_value_ignored(self) -> None:
        with pytest.raises(LocatorProcessError, match="Single value locator 'abc' was ignored"):
            Locator("abc").check_locator_fully_processed()

    def test_lookup_does_not_mark_used(self) -> None:
        locator = Locator("name:Frodo", "name")
        assert locator.lookup_single_dimension_value("name") == "Frodo"
        assert locator.is_unused("name")

    def test_hidden_dimension_is_not_reported(self) -> None:
        locator = Locator("secret:1", "secret", hidden=["secret"])
        locator.check_locator_fully_processed()

    def test_ignore_unused(self) -> None:
        locator = Locator("count:5,name:x", "count", "name")
        locator.add_ignore_unused_dimensions("count")
        locator.get_single_dimension_value("name")
        locator.check_locator_fully_processed()

    def test_mark_unused_and_all_unused(self) -> None:
        locator = Locator("a:1,b:2")
        locator.get_single_dimension_value("a")
        locator.get_single_dimension_value("b")
        locator.mark_unused("a")
        assert locator.get_unused_dimensions() == {"a"}
        locator.mark_all_unused()
        assert locator.get_unused_dimensions() == {"a", "b"}

    @pytest.mark.parametrize("mode", ["log", "log-warn", "off"])
    def test_report_modes_do_not_raise(self, mode: str) -> None:
        locator = Locator("bogus:1", "name", options=LocatorOptions(report_unused=mode))
        locator.check_locator_fully_processed()


# ---------------------------------------------------------------------------
# Help
# ---------------------------------------------------------------------------


class TestHelp:
    def test_single_value_help(self) -> None:
        locator = Locator(HELP_DIMENSION, "name")
        assert locator.is_help_requested()
        with pytest.raises(LocatorProcessError, match="Locator help requested"):
            locator.process_help_request()

    def test_help_dimension_lists_supported(self) -> None:
        locator = Locator("name:x,$help:", "name", "secret", hidden=["secret"])
        with pytest.raises(LocatorProcessError, match=r"Supported dimensions are: \[name\]"):
            locator.check_locator_fully_processed()

    def test_description_provider(self) -> None:
        locator = Locator("$help:", "name")
        locator.set_description_provider(lambda loc, hidden: f"custom hidden={hidden}")
        assert locator.get_locator_description(True) == "custom hidden=True"


# ---------------------------------------------------------------------------
# Mutation and rendering
# ---------------------------------------------------------------------------


class TestRendering:
    def test_unmodified_keeps_raw_text(self) -> None:
        assert Locator("name:x,age:1").get_string_representation() == "name:x,age:1"

    def test_modified_is_sorted(self) -> None:
        locator = Locator("name:x,age:1")
        locator.set_dimension("count", "5")
        assert locator.get_string_representation() == "age:1,count:5,name:x"

    def test_set_dimension_marks_unused(self) -> None:
        locator = Locator("a:1")
        locator.get_single_dimension_value("a")
        locator.set_dimension("a", "2")
        assert locator.is_unused("a")
        assert locator.get_single_dimension_value("a") == "2"

    def test_set_dimension_on_single_value(self) -> None:
        with pytest.raises(OperationError, match="single value locator"):
            Locator("abc").set_dimension("count", "1")

    def test_set_dimension_if_not_present(self) -> None:
        locator = Locator("a:1")
        locator.set_dimension_if_not_present("a", "2").set_dimension_if_not_present("b", "3")
        assert locator.get_string_representation() == "a:1,b:3"

    def test_remove_dimension(self) -> None:
        locator = Locator("a:1,b:2")
        assert locator.remove_dimension("a")
        assert not locator.remove_dimension("z")
        assert str(locator) == "b:2"

    def test_values_are_escaped(self) -> None:
        locator = Locator.empty()
        locator.set_dimension("text", "a,b")
        locator.set_dimension("odd", "a)b")
        assert locator.get_string_representation() == "odd:($base64:YSli),text:(a,b)"

    def test_render_value(self) -> None:
        assert render_value("plain") == "plain"
        assert render_value("x:y") == "(x:y)"
        assert render_value("f(x)") == "(f(x))"
        assert render_value(None) == "$any"
        assert render_value("$any") == "($any)"
        assert render_value("$base64:abc").startswith("($base64:")

    def test_single_value_rendering(self) -> None:
        assert Locator("(a:b)").get_string_representation() == "(a:b)"

    def test_repr(self) -> None:
        assert repr(Locator("a:1")) == "Locator('a:1')"


class TestConstruction:
    def test_create_applies_defaults(self) -> None:
        locator = Locator.create("name:x", Locator("count:10,name:y"))
        assert locator.get_single_dimension_value("name") == "x"
        assert locator.get_single_dimension_value("count") == "10"

    def test_create_without_text(self) -> None:
        locator = Locator.create(None, Locator("count:10"))
        assert locator.get_single_dimension_value("count") == "10"

    def test_defaults_not_applied_to_single_value(self) -> None:
        locator = Locator.create("abc", Locator("count:10"))
        assert locator.is_single_value()
        assert locator.lookup_single_dimension_value("count") is None

    def test_merge(self) -> None:
        assert Locator.merge("name:x", "count:10,name:y") == "count:10,name:x"

    def test_empty(self) -> None:
        locator = Locator.empty("a")
        assert locator.is_empty()
        assert not locator.is_single_value()
        assert locator.supported_dimensions == ["a"]

    def test_potentially_empty(self) -> None:
        assert Locator.potentially_empty(None).is_empty()
        assert Locator.potentially_empty("a:1").get_dimensions_count() == 1
        assert Locator.of(None) is None

    def test_copy_is_independent(self) -> None:
        original = Locator("a:1,b:2")
        original.get_single_dimension_value("a")
        copy = original.copy()
        copy.set_dimension("c", "3")
        assert copy.get_unused_dimensions() == {"b", "c"}
        assert original.get_unused_dimensions() == {"b"}
        assert str(original) == "a:1,b:2"

    def test_pool_interns_names(self) -> None:
        pool = StringPool()
        Locator("name:x", pool=pool)
        assert len(pool) >= 2
        assert pool.reuse(None) is None


class TestModuleHelpers:
    def test_get_string_locator(self) -> None:
        assert get_string_locator("foo", "bar", "x", "y:z") == "foo:bar,x:(y:z)"

    def test_get_string_locator_odd_pairs(self) -> None:
        with pytest.raises(OperationError, match="should be even"):
            get_string_locator("foo")

    def test_set_dimension(self) -> None:
        assert set_dimension("a:1", "count", 5) == "a:1,count:5"
        assert set_dimension(None, "count", 3) == "count:3"

    def test_set_dimension_single_value(self) -> None:
        with pytest.raises(LocatorProcessError, match="single value locator"):
            set_dimension("abc", "count", 1)

    def test_set_dimension_if_not_present(self) -> None:
        assert set_dimension_if_not_present("a:1", "a", "2") == "a:1"
        assert set_dimension_if_not_present("a:1", "b", "2") == "a:1,b:2"
        assert set_dimension_if_not_present("abc", "b", "2") == "abc"
        assert set_dimension_if_not_present(None, "b", "2") == "b:2"
        assert set_dimension_if_not_present("a:1", "b", None) == "a:1"


class TestBooleans:
    @pytest.mark.parametrize("value", ["true", "on", "YES", "in"])
    def test_true_spellings(self, value: str) -> None:
        assert get_strict_boolean(value) is True

    @pytest.mark.parametrize("value", ["false", "off", "no", "OUT"])
    def test_false_spellings(self, value: str) -> None:
        assert get_strict_boolean(value) is False

    @pytest.mark.parametrize("value", ["any", "all", "$any"])
    def test_any_means_no_filter(self, value: str) -> None:
        assert get_boolean_allowing_any(value) is None

    def test_invalid_boolean(self) -> None:
        with pytest.raises(LocatorProcessError, match="Invalid boolean value"):
            get_boolean_allowing_any("maybe")

    def test_dimension_boolean(self) -> None:
        locator = Locator("personal:any,pinned:yes")
        assert locator.get_single_dimension_value_as_boolean("personal") is None
        assert locator.get_single_dimension_value_as_boolean("pinned") is True
        assert locator.get_single_dimension_value_as_boolean("absent", False) is False

    def test_strict_boolean_rejects_any(self) -> None:
        with pytest.raises(LocatorProcessError, match="Invalid strict boolean value"):
            Locator("unique:any").get_single_dimension_value_as_strict_boolean("unique")


# ---------------------------------------------------------------------------
# Round-trip property
# ---------------------------------------------------------------------------

_values = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), max_size=30)


class TestRoundTrip:
    @given(value=_values)
    def test_rendered_value_parses_back(self, value: str) -> None:
        assume(value != ANY_LITERAL)
        text = Locator.empty().set_dimension("v", value).get_string_representation()
        assert Locator(text).get_single_dimension_value("v") == value

    @given(value=_values)
    def test_rendered_single_value_parses_back(self, value: str) -> None:
        assume(value)
        assert Locator(render_value(value)).get_single_value() == value

    @given(value=st.text(alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters=":("), min_size=1))
    def test_single_value_locator_text_is_stable(self, value: str) -> None:
        locator = Locator(value)
        assert Locator(locator.get_string_representation()).get_single_value() == locator.get_single_value()

    def test_unbalanced_single_value(self) -> None:
        text = Locator("abc)").get_string_representation()
        assert text.startswith("($base64:")
        assert Locator(text).get_single_value() == "abc)"

    @given(first=_values, second=_values)
    def test_canonical_text_is_stable(self, first: str, second: str) -> None:
        assume(ANY_LITERAL not in (first, second))
        text = Locator.empty().set_dimension("b", first).set_dimension("a", second).get_string_representation()
        reparsed = Locator(text)
        reparsed.set_dimension("a", reparsed.get_dimension_value("a"))
        assert reparsed.get_string_representation() == text
