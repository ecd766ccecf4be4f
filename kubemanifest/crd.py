"""
Conversion of CustomResourceDefinition manifests into kind schemas. Each served
version of a CRD becomes one KindSchema whose body attributes are derived from
the version's openAPIV3Schema.
"""

# Standard
from typing import Any, Dict, List, Optional, Tuple

# Third Party
import yaml

# First Party
import alog

# Local
from .exceptions import SchemaError
from .schema import RESERVED_ATTRIBUTES, AttributeKind, AttributeSchema, Cardinality
from .schema import KindSchema
from .utils import to_snake_case
from .validators import (
    Base64Validator,
    DateTimeValidator,
    LengthValidator,
    OneOfValidator,
    RangeValidator,
    RegexValidator,
    Validator,
)

log = alog.use_channel("CRD")

# Top-level properties that are never part of the configurable body
SKIPPED_TOP_LEVEL_PROPERTIES = frozenset(["apiVersion", "kind", "metadata", "status"])

# openAPI extensions
INT_OR_STRING_EXTENSION = "x-kubernetes-int-or-string"
PRESERVE_UNKNOWN_FIELDS_EXTENSION = "x-kubernetes-preserve-unknown-fields"

## Public ######################################################################


def kind_schemas_from_crd(crd: Dict[str, Any]) -> List[KindSchema]:
    """Convert a CustomResourceDefinition into one KindSchema per served
    version

    Args:
        crd:  Dict[str, Any]
            The CRD manifest (apiextensions.k8s.io/v1)

    Returns:
        kinds:  List[KindSchema]
            The kinds, in the order the CRD lists its versions

    Raises:
        SchemaError: If the manifest is not a usable CRD
    """
    if not isinstance(crd, dict) or crd.get("kind") != "CustomResourceDefinition":
        raise SchemaError("Manifest is not a CustomResourceDefinition")
    spec = crd.get("spec") or {}
    group = spec.get("group", "")
    kind = (spec.get("names") or {}).get("kind")
    if not kind:
        raise SchemaError("CustomResourceDefinition has no spec.names.kind")
    namespaced = spec.get("scope", "Namespaced") == "Namespaced"

    kinds = []
    for version in spec.get("versions") or []:
        if not version.get("served", True):
            log.debug("Skipping unserved version %s of %s", version.get("name"), kind)
            continue
        open_api = (version.get("schema") or {}).get("openAPIV3Schema") or {}
        properties = open_api.get("properties") or {}
        required = set(open_api.get("required") or [])
        body = _convert_properties(
            {
                key: val
                for key, val in properties.items()
                if key not in SKIPPED_TOP_LEVEL_PROPERTIES
            },
            required,
            kind,
        )
        body = [node for node in body if node.name not in RESERVED_ATTRIBUTES]
        kinds.append(
            KindSchema(
                group=group,
                version=version.get("name"),
                kind=kind,
                body=body,
                namespaced=namespaced,
                description=open_api.get("description", ""),
            )
        )
        log.debug2("Converted %s", kinds[-1].type_name)
    return kinds


def load_crd_file(path: str) -> List[KindSchema]:
    """Convert every CRD found in a (possibly multi-document) YAML file"""
    with open(path, encoding="utf-8") as handle:
        try:
            documents = [doc for doc in yaml.safe_load_all(handle) if doc]
        except yaml.YAMLError as err:
            raise SchemaError(f"Invalid YAML in {path}: {err}") from err
    kinds = []
    for document in documents:
        kinds.extend(kind_schemas_from_crd(document))
    return kinds


## Implementation ##############################################################


def _convert_properties(
    properties: Dict[str, Any],
    required: set,
    parent: str,
) -> List[AttributeSchema]:
    """Convert openAPI properties into attributes sorted by wire name"""
    attributes = []
    seen = set()
    for wire_name in sorted(properties):
        name = to_snake_case(wire_name)
        if not name or name in seen:
            log.warning(
                "Skipping property [%s] of [%s]: attribute name collision",
                wire_name,
                parent,
            )
            continue
        seen.add(name)
        attributes.append(
            _convert_property(
                name,
                wire_name,
                properties[wire_name] or {},
                wire_name in required,
            )
        )
    return attributes


def _convert_property(
    name: str,
    wire_name: str,
    prop: Dict[str, Any],
    required: bool,
) -> AttributeSchema:
    cardinality = Cardinality.REQUIRED if required else Cardinality.OPTIONAL
    description = prop.get("description", "")
    kind, children, validators = _classify(name, prop)
    return AttributeSchema(
        name=name,
        kind=kind,
        cardinality=cardinality,
        children=children,
        validators=validators,
        wire_name=wire_name,
        description=description,
    )


def _classify(  # pylint: disable=too-many-return-statements
    name: str, prop: Dict[str, Any]
) -> Tuple[AttributeKind, List[AttributeSchema], List[Validator]]:
    """Determine the kind, children and validators for a single property"""
    prop_type = prop.get("type")

    if prop.get(INT_OR_STRING_EXTENSION):
        return AttributeKind.INT_OR_STRING, [], _string_validators(prop)

    if prop_type == "string":
        return AttributeKind.STRING, [], _string_validators(prop)
    if prop_type == "integer":
        return AttributeKind.INT, [], _number_validators(prop)
    if prop_type == "number":
        return AttributeKind.FLOAT, [], _number_validators(prop)
    if prop_type == "boolean":
        return AttributeKind.BOOL, [], []

    if prop_type == "array":
        items = prop.get("items") or {}
        validators = _collection_validators(prop, "minItems", "maxItems")
        if items.get("type") == "string" and not items.get(INT_OR_STRING_EXTENSION):
            return AttributeKind.LIST, [], validators + _string_validators(items)
        children = _object_children(name, items)
        if items.get("type") == "object" and children:
            return AttributeKind.LIST_OF_OBJECTS, children, validators
        return AttributeKind.DYNAMIC, [], []

    if prop_type == "object":
        children = _object_children(name, prop)
        if children:
            return AttributeKind.OBJECT, children, []
        additional = prop.get("additionalProperties")
        if (
            isinstance(additional, dict)
            and additional.get("type") == "string"
            and not prop.get(PRESERVE_UNKNOWN_FIELDS_EXTENSION)
        ):
            return (
                AttributeKind.MAP,
                [],
                _collection_validators(prop, "minProperties", "maxProperties"),
            )

    return AttributeKind.DYNAMIC, [], []


def _object_children(name: str, prop: Dict[str, Any]) -> List[AttributeSchema]:
    """Objects which also preserve unknown fields are kept dynamic so that the
    unknown fields survive
    """
    if prop.get(PRESERVE_UNKNOWN_FIELDS_EXTENSION):
        return []
    return _convert_properties(
        prop.get("properties") or {}, set(prop.get("required") or []), name
    )


def _string_validators(prop: Dict[str, Any]) -> List[Validator]:
    validators = []
    if prop.get("enum"):
        validators.append(OneOfValidator(values=list(prop["enum"])))
    if prop.get("pattern"):
        validators.append(RegexValidator(pattern=prop["pattern"]))
    if prop.get("format") == "byte":
        validators.append(Base64Validator())
    if prop.get("format") == "date-time":
        validators.append(DateTimeValidator())
    length = _bounds(prop, "minLength", "maxLength")
    if length:
        validators.append(LengthValidator(min_len=length[0], max_len=length[1]))
    return validators


def _number_validators(prop: Dict[str, Any]) -> List[Validator]:
    validators = []
    if prop.get("enum"):
        validators.append(OneOfValidator(values=list(prop["enum"])))
    bounds = _bounds(prop, "minimum", "maximum")
    if bounds:
        validators.append(RangeValidator(min=bounds[0], max=bounds[1]))
    return validators


def _collection_validators(
    prop: Dict[str, Any], min_key: str, max_key: str
) -> List[Validator]:
    bounds = _bounds(prop, min_key, max_key)
    if bounds:
        return [LengthValidator(min_len=bounds[0], max_len=bounds[1])]
    return []


def _bounds(prop: Dict[str, Any], min_key: str, max_key: str) -> Optional[Tuple]:
    low = prop.get(min_key)
    high = prop.get(max_key)
    if low is None and high is None:
        return None
    return low, high
