"""
Bracket-notation query parameter parsing and rendering.
"""

from urllib.parse import parse_qsl

from describer.core.params import encode_nested_params, parse_nested_params


def test_parses_nested_keys():
    params = parse_nested_params(
        [
            ("q[title_cont]", "mona"),
            ("q[scope][]", "represented"),
            ("q[scope][]", "unassigned"),
            ("page[number]", "2"),
            ("page[size]", "20"),
        ]
    )
    assert params == {
        "q": {"title_cont": "mona", "scope": ["represented", "unassigned"]},
        "page": {"number": "2", "size": "20"},
    }


def test_repeated_plain_key_keeps_last_value():
    assert parse_nested_params([("q[title_cont]", "a"), ("q[title_cont]", "b")]) == {
        "q": {"title_cont": "b"}
    }


def test_top_level_keys_pass_through():
    assert parse_nested_params([("format", "json")]) == {"format": "json"}


def test_encode_round_trips_through_parse():
    params = {
        "q": {"title_cont": "mona lisa", "scope": ["represented"], "priority_flag_true": True},
        "page": {"number": 3, "size": 25},
    }
    encoded = encode_nested_params(params)
    pairs = parse_qsl(encoded)

    assert ("q[scope][]", "represented") in pairs
    assert ("q[priority_flag_true]", "true") in pairs
    assert ("page[number]", "3") in pairs
    assert parse_nested_params(pairs) == {
        "q": {"title_cont": "mona lisa", "scope": ["represented"], "priority_flag_true": "true"},
        "page": {"number": "3", "size": "25"},
    }
