"""
Version helpers used for license entitlement.

Licensing backends report versions like "1.2.3" while entitlement is granted
per minor release, so both sides are reduced with remove_patch_version()
before they are compared.
"""

import re
from typing import List

# Ordering of the non-numeric version tokens understood by the
# licensing backend ("1.0RC1" < "1.0" < "1.0pl1").
SPECIAL_FORMS = [
    ("dev", 0),
    ("alpha", 1),
    ("a", 1),
    ("beta", 2),
    ("b", 2),
    ("RC", 3),
    ("rc", 3),
    ("#", 4),
    ("pl", 5),
    ("p", 5),
]

_UNKNOWN_FORM = -6
_SEPARATORS = re.compile(r"[-_+]")
_RUNS = re.compile(r"\d+|[^\d.]+")


def remove_patch_version(version: str) -> str:
    """Turn "1.1.x" into "1.1".

    Short forms such as "1.0" or "10.2" are left alone: the last dot has to
    sit past index 2 before anything is cut.
    """
    dot_position = version.rfind(".")

    if dot_position > 2:
        return version[:dot_position]

    return version


def _canonicalize(version: str) -> List[str]:
    """Split a version into its numeric and alphabetic parts."""
    parts = []
    for chunk in _SEPARATORS.sub(".", version).split("."):
        parts.extend(_RUNS.findall(chunk))
    return parts


def _special_form_order(part: str) -> int:
    for name, order in SPECIAL_FORMS:
        if part.startswith(name):
            return order
    return _UNKNOWN_FORM


def _compare_special(part1: str, part2: str) -> int:
    order1 = _special_form_order(part1)
    order2 = _special_form_order(part2)
    return (order1 > order2) - (order1 < order2)


def _compare_parts(part1: str, part2: str) -> int:
    if part1.isdigit() and part2.isdigit():
        number1, number2 = int(part1), int(part2)
        return (number1 > number2) - (number1 < number2)
    if not part1.isdigit() and not part2.isdigit():
        return _compare_special(part1, part2)
    if part1.isdigit():
        return _compare_special("#", part2)
    return _compare_special(part1, "#")


def compare_versions(version1: str, version2: str) -> int:
    """
    Compare two version strings.

    Returns -1, 0 or 1. Numeric parts compare numerically ("1.10" > "1.9"),
    pre-release tokens sort below the release they precede ("1.0RC1" <
    "1.0"), and a trailing numeric part wins over a missing one
    ("1.0.1" > "1.0").
    """
    parts1 = _canonicalize(version1)
    parts2 = _canonicalize(version2)

    if not parts1 or not parts2:
        if not parts1 and not parts2:
            return 0
        return -1 if not parts1 else 1

    for part1, part2 in zip(parts1, parts2):
        result = _compare_parts(part1, part2)
        if result != 0:
            return result

    if len(parts1) > len(parts2):
        extra = parts1[len(parts2)]
        return 1 if extra.isdigit() else _compare_special(extra, "#")
    if len(parts2) > len(parts1):
        extra = parts2[len(parts1)]
        return -1 if extra.isdigit() else _compare_special("#", extra)

    return 0


def version_at_least(candidate: str, threshold: str) -> bool:
    """True if candidate covers threshold once both lose their patch part."""
    return compare_versions(
        remove_patch_version(candidate),
        remove_patch_version(threshold),
    ) >= 0
