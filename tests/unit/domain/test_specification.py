"""Tests for src/domain/models/specification.py.

Predicates are exercised against a plain namespace standing in for the
column namespace; combining with & works on any operand supporting it.
"""

from types import SimpleNamespace

import pytest

from src.domain.models import Include, Specification
from src.domain.models.specification import LIKE_ESCAPE, as_include, like_literal


class _Flag:
    def __init__(self, value):
        self.value = value

    def __and__(self, other):
        return _Flag(self.value and other.value)


_ROW = SimpleNamespace(grade=7, last_name="Dlamini")


# --- Include ---

def test_include_of_splits_dotted_path():
    assert Include.of("parent.contact_numbers").path == ("parent", "contact_numbers")


def test_include_then_extends_chain():
    include = Include.of("parent").then("contact_numbers")
    assert include.path == ("parent", "contact_numbers")
    assert str(include) == "parent.contact_numbers"


def test_include_rejects_empty_segment():
    with pytest.raises(ValueError):
        Include.of("parent..contact_numbers")


def test_as_include_accepts_strings_and_includes():
    assert as_include("learners") == Include(("learners",))
    include = Include.of("addresses")
    assert as_include(include) is include


def test_specification_normalises_string_includes():
    spec = Specification(includes=("learners", Include.of("addresses")))
    assert spec.includes == (Include(("learners",)), Include(("addresses",)))


# --- composition ---

def test_where_on_empty_spec_sets_criteria():
    spec = Specification().where(lambda c: _Flag(c.grade > 5))
    assert spec.criteria(_ROW).value is True


def test_where_combines_with_existing_criteria():
    spec = Specification(criteria=lambda c: _Flag(c.grade > 5)).where(
        lambda c: _Flag(c.last_name == "Mokoena")
    )
    assert spec.criteria(_ROW).value is False


def test_helpers_return_new_specifications():
    base = Specification()
    assert base.include("learners") is not base
    assert base.include("learners").includes == (Include(("learners",)),)
    assert base.includes == ()


def test_ordered_by_replaces_ordering():
    spec = Specification(order_by=lambda c: c.grade).ordered_by(lambda c: c.last_name)
    assert spec.order_by(_ROW) == "Dlamini"


# --- windows ---

def test_paged_maps_page_onto_skip_and_take():
    spec = Specification().paged(page_nr=3, page_size=25)
    assert (spec.skip, spec.take) == (50, 25)
    assert spec.is_paged


def test_first_page_skips_nothing():
    assert Specification().paged(1, 10).skip == 0


def test_unpaged_clears_window():
    spec = Specification().paged(2, 10).unpaged()
    assert spec.skip is None and spec.take is None
    assert not spec.is_paged


def test_window_errors_report_negative_values():
    errors = Specification().window(-1, -5).window_errors()
    assert errors == ["skip must be non-negative, got -1", "take must be non-negative, got -5"]


def test_window_errors_empty_for_valid_window():
    assert Specification().window(0, 0).window_errors() == []


# --- LIKE patterns ---

def test_like_literal_escapes_wildcards():
    assert like_literal("100%_done") == "100\\%\\_done"


def test_like_literal_escapes_the_escape_character_first():
    assert like_literal("a\\%") == "a\\\\\\%"


def test_like_literal_leaves_plain_text_alone():
    assert like_literal("thandi@example.org") == "thandi@example.org"
    assert LIKE_ESCAPE == "\\"
