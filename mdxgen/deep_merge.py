"""Logic for deep merging configuration dictionaries."""

from typing import Any

# Keys whose lists accumulate instead of being replaced.
ADDITIVE_KEYS = frozenset({"exclude_patterns"})


def deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two configuration dictionaries.

    - Mappings are merged recursively, so a user file can override a single
      field of a single package.
    - Lists in ``update`` replace lists in ``base``, EXCEPT for the keys in
      ``ADDITIVE_KEYS``, which are concatenated and deduplicated in order.
    """
    result = base.copy()
    for key, value in update.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        elif (
            key in ADDITIVE_KEYS
            and isinstance(current, list)
            and isinstance(value, list)
        ):
            result[key] = list(dict.fromkeys([*current, *value]))
        else:
            result[key] = value
    return result
