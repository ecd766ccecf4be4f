"""
The serializer renders a bound model into a canonical YAML manifest. Key order
follows the schema declaration order, absent attributes are omitted, and the
output for a given bound model is always byte-identical.
"""

# Standard
from typing import Any, Dict

# Third Party
import yaml

# First Party
import alog

# Local
from . import config, constants
from .bound_model import ABSENT, BoundObject
from .exceptions import assert_consistent
from .int_or_string import IntOrString
from .schema import AttributeKind, AttributeSchema
from .utils import describe_shape, index_path, join_path

log = alog.use_channel("RNDR")

## Public ######################################################################


def render(bound: BoundObject, api_version: str, kind: str) -> str:
    """Render a bound model as a YAML manifest

    Args:
        bound:  BoundObject
            The bound model for the root of a kind schema
        api_version:  str
            The apiVersion to render (e.g. monitoring.coreos.com/v1)
        kind:  str
            The kind to render (e.g. PodMonitor)

    Returns:
        manifest:  str
            The YAML document

    Raises:
        InternalInconsistency: If the bound model does not match its schema
    """
    manifest = to_manifest_dict(bound, api_version, kind)
    rendered = yaml.safe_dump(
        manifest,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        explicit_start=config.manifest.explicit_start,
        width=config.manifest.yaml_width,
    )
    log.debug3("Rendered manifest for %s/%s:\n%s", api_version, kind, rendered)
    return rendered


def to_manifest_dict(bound: BoundObject, api_version: str, kind: str) -> dict:
    """Build the manifest as plain python data with keys in render order

    Args:
        bound:  BoundObject
            The bound model for the root of a kind schema
        api_version:  str
            The apiVersion to render
        kind:  str
            The kind to render

    Returns:
        manifest:  dict
            apiVersion, kind, metadata, then every present body field
    """
    assert_consistent(
        isinstance(bound, BoundObject), f"Cannot render {describe_shape(bound)}"
    )
    root = bound.schema
    assert_consistent(
        root.has_child(constants.METADATA_ATTRIBUTE),
        f"[{root.name}] is not the root of a kind schema",
    )

    metadata_node = root.child(constants.METADATA_ATTRIBUTE)
    metadata = bound[constants.METADATA_ATTRIBUTE]
    assert_consistent(
        isinstance(metadata, BoundObject),
        f"metadata must be bound for [{root.name}]",
    )
    rendered_metadata = _render_value(
        metadata_node, metadata, constants.METADATA_ATTRIBUTE
    )
    assert_consistent("name" in rendered_metadata, "metadata.name must be bound")

    manifest = {
        constants.API_VERSION_KEY: api_version,
        constants.KIND_KEY: kind,
        constants.METADATA_KEY: rendered_metadata,
    }
    for node in root.children:
        if node.is_computed or node.name == constants.METADATA_ATTRIBUTE:
            continue
        value = bound[node.name]
        if value is ABSENT:
            continue
        manifest[node.wire_name] = _render_value(node, value, node.name)
    return manifest


## Implementation ##############################################################


def _render_object(bound: BoundObject, path: str) -> Dict[str, Any]:
    rendered = {}
    for node in bound.schema.children:
        value = bound[node.name]
        if value is ABSENT:
            continue
        node_path = join_path(path, node.name)
        rendered[node.wire_name] = _render_value(node, value, node_path)
    return rendered


def _check(condition: bool, node: AttributeSchema, value: Any, path: str):
    assert_consistent(
        condition,
        f"Bound value at [{path}] is {describe_shape(value)}, "
        f"schema declares {node.kind.value}",
    )


def _render_value(  # pylint: disable=too-many-return-statements
    node: AttributeSchema, value: Any, path: str
) -> Any:
    kind = node.kind
    if kind is AttributeKind.STRING:
        _check(isinstance(value, str), node, value, path)
        return value
    if kind is AttributeKind.BOOL:
        _check(isinstance(value, bool), node, value, path)
        return value
    if kind is AttributeKind.INT:
        _check(
            isinstance(value, int) and not isinstance(value, bool), node, value, path
        )
        return value
    if kind is AttributeKind.FLOAT:
        _check(
            isinstance(value, (int, float)) and not isinstance(value, bool),
            node,
            value,
            path,
        )
        return value
    if kind is AttributeKind.INT_OR_STRING:
        _check(isinstance(value, IntOrString), node, value, path)
        return value.to_wire()
    if kind is AttributeKind.MAP:
        _check(
            isinstance(value, dict)
            and all(isinstance(val, str) for val in value.values()),
            node,
            value,
            path,
        )
        return {key: value[key] for key in sorted(value)}
    if kind is AttributeKind.LIST:
        _check(
            isinstance(value, list) and all(isinstance(val, str) for val in value),
            node,
            value,
            path,
        )
        return list(value)
    if kind is AttributeKind.OBJECT:
        _check(
            isinstance(value, BoundObject) and value.schema is node, node, value, path
        )
        return _render_object(value, path)
    if kind is AttributeKind.LIST_OF_OBJECTS:
        _check(isinstance(value, list), node, value, path)
        rendered = []
        for idx, element in enumerate(value):
            element_path = index_path(path, idx)
            _check(
                isinstance(element, BoundObject) and element.schema is node,
                node,
                element,
                element_path,
            )
            rendered.append(_render_object(element, element_path))
        return rendered
    if kind is AttributeKind.DYNAMIC:
        return _render_dynamic(value)

    assert_consistent(False, f"Unhandled attribute kind {kind} at [{path}]")
    return None


def _render_dynamic(value: Any) -> Any:
    """Dynamic maps are rendered with sorted keys so output is canonical"""
    if isinstance(value, dict):
        return {key: _render_dynamic(value[key]) for key in sorted(value)}
    if isinstance(value, list):
        return [_render_dynamic(element) for element in value]
    return value
