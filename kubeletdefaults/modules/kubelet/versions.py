"""Orchestrator version parsing and version gates."""
import re
from typing import Optional, Tuple

# (major, minor, patch, release); release is 0 for a pre-release, else 1
Version = Tuple[int, int, int, int]

_VERSION_RE = re.compile(r'^(\d+)\.(\d+)(?:\.(\d+))?(-[0-9A-Za-z.-]+)?$')

# Pause image tags, newest first: (minimum version, tag)
PAUSE_IMAGE_TAGS = [
    ((1, 8, 0, 0), 'pause-amd64:3.1'),
    ((0, 0, 0, 0), 'pause-amd64:3.0'),
]
DEFAULT_PAUSE_IMAGE_TAG = 'pause-amd64:3.1'


def parse_version(version: Optional[str]) -> Optional[Version]:
    """Parse ``v1.14.1`` / ``1.14.1+build`` / ``1.15.0-beta.1`` / ``1.14`` into a tuple.

    A pre-release sorts below its release, so ``1.12.0-alpha.1`` is older
    than ``1.12.0``. Returns None when the string is not a version.
    """
    if not version:
        return None
    core = str(version).strip().lstrip('v')
    # Build metadata never affects ordering
    core = core.split('+', 1)[0]
    match = _VERSION_RE.match(core)
    if not match:
        return None
    major, minor, patch, prerelease = match.groups()
    return int(major), int(minor), int(patch or 0), 0 if prerelease else 1


def is_version_ge(version: Optional[str], minimum: str) -> bool:
    """True when ``version`` >= ``minimum``; unparseable versions never match."""
    parsed = parse_version(version)
    floor = parse_version(minimum)
    if parsed is None or floor is None:
        return False
    return parsed >= floor


def version_in_range(version: Optional[str], minimum: str, below: str) -> bool:
    """True for ``minimum <= version < below``."""
    parsed = parse_version(version)
    if parsed is None:
        return False
    return is_version_ge(version, minimum) and not is_version_ge(version, below)


def pause_image_tag(version: Optional[str]) -> str:
    parsed = parse_version(version)
    if parsed is None:
        return DEFAULT_PAUSE_IMAGE_TAG
    for floor, tag in PAUSE_IMAGE_TAGS:
        if parsed >= floor:
            return tag
    return DEFAULT_PAUSE_IMAGE_TAG
