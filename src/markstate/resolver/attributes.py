"""Attribute containment predicate shared by the cursor and range resolvers."""

from __future__ import annotations

import re
from typing import Any, Mapping

_MISSING = object()


def object_includes(actual: Mapping[str, Any], expected: Mapping[str, Any], *, strict: bool = True) -> bool:
    """Check that every key in ``expected`` is present in ``actual`` with an equal value.

    ``actual`` may carry keys that ``expected`` does not mention. In non-strict
    mode an expected value may also be a compiled pattern, which matches when
    it is found in the actual value.
    """
    if not expected:
        return True

    for key, wanted in expected.items():
        value = actual.get(key, _MISSING)
        if value is _MISSING:
            return False
        if not strict and isinstance(wanted, re.Pattern):
            if wanted.search(str(value)) is None:
                return False
            continue
        if not _same_value(value, wanted):
            return False
    return True


def _same_value(value: Any, wanted: Any) -> bool:
    # True must not match 1.
    if isinstance(value, bool) or isinstance(wanted, bool):
        return type(value) is type(wanted) and value == wanted
    return value == wanted
