"""Helpers for reading and merging kubelet flag maps."""
from typing import Dict, List, Optional

FEATURE_GATES = '--feature-gates'


def parse_tokens(value: Optional[str]) -> Dict[str, str]:
    """Split ``A=true,B=false`` into ``{'A': 'A=true', 'B': 'B=false'}``.

    Tokens are keyed by the part before ``=``; blank tokens are dropped.
    On a repeated key the first token wins.
    """
    tokens: Dict[str, str] = {}
    for raw in (value or '').split(','):
        token = raw.strip()
        if not token:
            continue
        key = token.split('=', 1)[0].strip()
        tokens.setdefault(key, token)
    return tokens


def combine_values(*values: Optional[str]) -> str:
    """Union comma-joined token sets.

    Earlier values win on a key collision, so pass the user's value first.
    The result is sorted lexicographically by token.
    """
    merged: Dict[str, str] = {}
    for value in values:
        for key, token in parse_tokens(value).items():
            merged.setdefault(key, token)
    return ','.join(sorted(merged.values()))


def merge_token_flag(flags: Dict[str, str], key: str, *additions: Optional[str]) -> Dict[str, str]:
    """Union ``additions`` into the token set stored under ``key``.

    An empty result leaves the map alone: absent keys stay absent and an
    explicit value is kept verbatim.
    """
    combined = combine_values(flags.get(key), *additions)
    if combined:
        flags[key] = combined
    return flags


def merge_feature_gates(flags: Dict[str, str], *gates: Optional[str]) -> Dict[str, str]:
    return merge_token_flag(flags, FEATURE_GATES, *gates)


def set_missing_values(flags: Dict[str, str], defaults: Dict[str, str]) -> List[str]:
    """Copy every key of ``defaults`` that ``flags`` lacks. Returns the added keys."""
    added = []
    for key, value in defaults.items():
        if key not in flags:
            flags[key] = value
            added.append(key)
    return added


def copy_flags(flags: Optional[Dict[str, str]]) -> Dict[str, str]:
    return dict(flags or {})
