"""
Filter parameter normalization.
"""

import pytest

from describer.services.filter_params import (
    filter_spec_to_params,
    normalize_filter_params,
    split_terms,
)


def test_empty_input_gives_empty_spec():
    assert dict(normalize_filter_params(None)) == {}
    assert dict(normalize_filter_params({})) == {}


def test_multi_term_keys_are_split_on_spaces_and_commas():
    spec = normalize_filter_params(
        {
            "title_cont_all": "mona, lisa  portrait",
            "identifier_cont_any": "a,b",
            "title_cont": "mona lisa",
        }
    )
    assert spec["title_cont_all"] == ("mona", "lisa", "portrait")
    assert spec["identifier_cont_any"] == ("a", "b")
    assert spec["title_cont"] == "mona lisa"


def test_list_values_for_multi_term_keys_are_split_per_item():
    spec = normalize_filter_params({"title_i_cont_any": ["a b", "c"]})
    assert spec["title_i_cont_any"] == ("a", "b", "c")


def test_scope_list_becomes_individual_flags():
    spec = normalize_filter_params(
        {"scope": ["represented", "unassigned"], "title_cont": "x"}
    )
    assert "scope" not in spec
    assert spec["represented"] is True
    assert spec["unassigned"] is True
    assert spec["title_cont"] == "x"


def test_single_scope_name_is_accepted():
    spec = normalize_filter_params({"scope": "assigned"})
    assert dict(spec) == {"assigned": True}


def test_blank_scope_names_are_dropped():
    assert dict(normalize_filter_params({"scope": ["", None]})) == {}


def test_spec_is_read_only():
    spec = normalize_filter_params({"title_cont": "x"})
    with pytest.raises(TypeError):
        spec["title_cont"] = "y"


def test_unknown_keys_are_left_for_the_query_builder():
    assert normalize_filter_params({"bogus": "1"})["bogus"] == "1"


def test_spec_thaws_back_to_plain_params():
    spec = normalize_filter_params({"title_cont_all": "a b", "scope": ["represented"]})
    assert filter_spec_to_params(spec) == {"title_cont_all": ["a", "b"], "represented": True}


def test_split_terms_ignores_none():
    assert split_terms(None) == ()
    assert split_terms(" , ") == ()
