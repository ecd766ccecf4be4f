"""
Common utilities shared across components in the library
"""

# Standard
from typing import Any, List
import re

# Local
from . import constants

## Shapes ######################################################################


def describe_shape(value: Any) -> str:
    """Get a short name for the shape of a raw configuration value. This is
    used when reporting type mismatches.

    NOTE: bool is checked before int since bool is a subclass of int
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "map"
    if isinstance(value, (list, tuple)):
        return "list"
    return type(value).__name__


## Names #######################################################################

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_]+")


def to_snake_case(name: str) -> str:
    """Convert a camelCase wire name to the snake_case attribute name

    Examples:
        subscriptionID -> subscription_id
        oAuthTokenId -> o_auth_token_id
        x-kubernetes-int-or-string -> x_kubernetes_int_or_string
    """
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _WORD_BOUNDARY.sub(r"\1_\2", name)
    name = _NON_IDENTIFIER.sub("_", name)
    return name.strip("_").lower()


def to_camel_case(name: str) -> str:
    """Convert a snake_case attribute name to its default camelCase wire name"""
    first, *rest = name.split("_")
    return first + "".join(part[:1].upper() + part[1:] for part in rest)


## Paths #######################################################################

_INDEX_EXPR = re.compile(r"\[\d+\]")


def join_path(parent: str, name: str) -> str:
    """Append an attribute name to a dotted path"""
    if not parent:
        return name
    return f"{parent}{constants.NESTED_DICT_DELIM}{name}"


def index_path(parent: str, index: int) -> str:
    """Append a positional index to a dotted path"""
    return f"{parent}[{index}]"


def split_path(path: str) -> List[str]:
    """Split a dotted path into its attribute names, dropping any positional
    indices (spec.tags[2].key -> ["spec", "tags", "key"])
    """
    path = _INDEX_EXPR.sub("", path)
    return [part for part in path.split(constants.NESTED_DICT_DELIM) if part]
