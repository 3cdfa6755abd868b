import pytest

from kubeletdefaults.modules.kubelet.flags import (
    combine_values,
    copy_flags,
    merge_feature_gates,
    parse_tokens,
    set_missing_values,
)


def test_parse_tokens_keys_on_name():
    assert parse_tokens("A=true, B=false,,") == {"A": "A=true", "B": "B=false"}
    assert parse_tokens("Standalone") == {"Standalone": "Standalone"}
    assert parse_tokens(None) == {}
    assert parse_tokens("") == {}


def test_combine_values_sorted_union():
    assert combine_values("b=1", "a=1,c=1") == "a=1,b=1,c=1"
    assert combine_values("", None) == ""


def test_combine_values_first_value_wins():
    assert combine_values("PodPriority=false", "PodPriority=true") == "PodPriority=false"
    assert combine_values("X=1,X=2") == "X=1"


def test_merge_feature_gates():
    flags = {}
    merge_feature_gates(flags, "PodPriority=true")
    assert flags == {"--feature-gates": "PodPriority=true"}

    merge_feature_gates(flags, "PodPriority=true", "Accelerators=true")
    assert flags["--feature-gates"] == "Accelerators=true,PodPriority=true"


@pytest.mark.parametrize("initial", [{}, {"--feature-gates": ""}])
def test_merge_feature_gates_nothing_to_add(initial):
    flags = dict(initial)
    merge_feature_gates(flags, None)
    assert flags == initial


def test_set_missing_values_keeps_existing():
    flags = {"--max-pods": "99"}
    added = set_missing_values(flags, {"--max-pods": "110", "--address": "0.0.0.0"})
    assert flags == {"--max-pods": "99", "--address": "0.0.0.0"}
    assert added == ["--address"]


def test_copy_flags_is_independent():
    original = {"--a": "1"}
    copied = copy_flags(original)
    copied["--a"] = "2"
    assert original["--a"] == "1"
    assert copy_flags(None) == {}
