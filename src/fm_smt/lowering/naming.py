"""
Variable naming scheme.

Names are derived only from feature/attribute identifiers plus fixed
suffixes, so two conversions of the same model use identical variables.
"""

import re

UPPER_SUFFIX = "-upper"
LOWER_SUFFIX = "-lower"
AVG_DIVIDER_SUFFIX = "_AVG_INT"
LENGTH_SUFFIX = "-len"
STRING_VALUE_SUFFIX = "-str"


def attribute_name(feature_id: str, attribute: str) -> str:
    return f"{feature_id}.{attribute}"


def string_value_name(feature_id: str) -> str:
    # differs from the boolean selection variable of the same feature
    return f"{feature_id}{STRING_VALUE_SUFFIX}"


def avg_divider_name(feature_id: str) -> str:
    return f"{feature_id}{AVG_DIVIDER_SUFFIX}"


def length_name(reference: str) -> str:
    return f"{reference}{LENGTH_SUFFIX}"


def group_namespace(parent_id: str, group_index: int) -> str:
    return f"{parent_id}-group{group_index}"


def counter_name(namespace: str, suffix: str, i: int, j: int) -> str:
    return f"{namespace}{suffix}_{i}_{j}"


def overflow_name(namespace: str, suffix: str, i: int) -> str:
    return f"{namespace}{suffix}_overflow_{i}"


_AUXILIARY_NAME = re.compile(
    rf"({re.escape(UPPER_SUFFIX)}|{re.escape(LOWER_SUFFIX)})_(\d+_\d+|overflow_\d+)$")


def is_auxiliary_name(name: str) -> bool:
    """True if ``name`` has the shape of a cardinality counter or overflow variable."""
    return _AUXILIARY_NAME.search(name) is not None
