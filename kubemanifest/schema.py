"""
This module holds the declarative attribute schema for resource kinds. A
KindSchema is built once per kind (usually from a data declaration) and is
immutable and freely shared afterwards.
"""

# Standard
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

# First Party
import alog

# Local
from . import constants
from .exceptions import assert_schema
from .utils import split_path, to_camel_case, to_snake_case
from .validators import (
    AnnotationsValidator,
    LabelsValidator,
    NameValidator,
    Validator,
    construct_validator,
)

log = alog.use_channel("SCHMA")


class AttributeKind(Enum):
    """The semantic type of an attribute"""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    INT_OR_STRING = "int_or_string"
    MAP = "map"
    LIST = "list"
    OBJECT = "object"
    LIST_OF_OBJECTS = "list_of_objects"
    DYNAMIC = "dynamic"


# Kinds which hold nested attributes
NESTED_KINDS = frozenset([AttributeKind.OBJECT, AttributeKind.LIST_OF_OBJECTS])


class Cardinality(Enum):
    """Whether an attribute must, may, or must not be supplied by the caller"""

    REQUIRED = "required"
    OPTIONAL = "optional"
    COMPUTED = "computed"


## AttributeSchema #############################################################


class AttributeSchema:
    """A single node in the schema tree"""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        name: str,
        kind: AttributeKind,
        cardinality: Cardinality = Cardinality.OPTIONAL,
        children: Optional[Iterable["AttributeSchema"]] = None,
        validators: Optional[Iterable[Validator]] = None,
        wire_name: Optional[str] = None,
        description: str = "",
    ):
        """Construct and check the node invariants

        Args:
            name:  str
                The snake_case attribute name used in configuration and paths
            kind:  AttributeKind
                The semantic type of the attribute
            cardinality:  Cardinality
                Required, optional, or computed
            children:  Optional[Iterable[AttributeSchema]]
                Ordered child nodes for object and list_of_objects kinds
            validators:  Optional[Iterable[Validator]]
                Validators run against the bound value
            wire_name:  Optional[str]
                The name used in the rendered manifest. Defaults to the
                camelCase form of name.
            description:  str
                Human readable description
        """
        children = tuple(children or ())
        assert_schema(
            isinstance(name, str) and bool(name),
            "Attribute names must be non-empty strings",
        )
        assert_schema(
            isinstance(kind, AttributeKind), f"Invalid kind for [{name}]: {kind}"
        )
        assert_schema(
            isinstance(cardinality, Cardinality),
            f"Invalid cardinality for [{name}]: {cardinality}",
        )
        if kind in NESTED_KINDS:
            assert_schema(bool(children), f"Nested attribute [{name}] has no children")
        else:
            assert_schema(not children, f"Leaf attribute [{name}] cannot have children")

        children_by_name = {}
        wire_names = set()
        for child in children:
            assert_schema(
                isinstance(child, AttributeSchema),
                f"Invalid child of [{name}]: {child}",
            )
            assert_schema(
                child.name not in children_by_name,
                f"Duplicate attribute [{child.name}] in [{name}]",
            )
            assert_schema(
                child.wire_name not in wire_names,
                f"Duplicate wire name [{child.wire_name}] in [{name}]",
            )
            children_by_name[child.name] = child
            wire_names.add(child.wire_name)

        self._name = name
        self._kind = kind
        self._cardinality = cardinality
        self._children = children
        self._children_by_name = children_by_name
        self._validators = tuple(validators or ())
        self._wire_name = wire_name or to_camel_case(name)
        self._description = description

    ## Properties ##############################################################

    @property
    def name(self) -> str:
        return self._name

    @property
    def wire_name(self) -> str:
        return self._wire_name

    @property
    def kind(self) -> AttributeKind:
        return self._kind

    @property
    def cardinality(self) -> Cardinality:
        return self._cardinality

    @property
    def children(self) -> tuple:
        return self._children

    @property
    def validators(self) -> tuple:
        return self._validators

    @property
    def description(self) -> str:
        return self._description

    @property
    def is_required(self) -> bool:
        return self._cardinality is Cardinality.REQUIRED

    @property
    def is_optional(self) -> bool:
        return self._cardinality is Cardinality.OPTIONAL

    @property
    def is_computed(self) -> bool:
        return self._cardinality is Cardinality.COMPUTED

    @property
    def is_nested(self) -> bool:
        return self._kind in NESTED_KINDS

    ## Lookup ##################################################################

    def child(self, name: str) -> "AttributeSchema":
        """Get a direct child by attribute name

        Raises:
            KeyError: If no child with the given name exists
        """
        if name not in self._children_by_name:
            raise KeyError(f"No attribute [{name}] in [{self._name}]")
        return self._children_by_name[name]

    def has_child(self, name: str) -> bool:
        return name in self._children_by_name

    ## Data ####################################################################

    @classmethod
    def from_dict(cls, declaration: Dict[str, Any]) -> "AttributeSchema":
        """Construct a node (and its children) from a data declaration of the
        form:

            name: tags
            wireName: tags
            type: list_of_objects
            cardinality: optional
            description: ...
            validators:
              - type: length
                max_len: 10
            attributes:
              - ...
        """
        assert_schema(
            isinstance(declaration, dict),
            f"Invalid attribute declaration: {declaration}",
        )
        name = declaration.get("name")
        try:
            kind = AttributeKind(declaration.get("type"))
            cardinality = Cardinality(declaration.get("cardinality", "optional"))
        except ValueError as err:
            assert_schema(False, f"Invalid declaration for [{name}]: {err}")
        return cls(
            name=name,
            kind=kind,
            cardinality=cardinality,
            children=[
                cls.from_dict(child) for child in declaration.get("attributes", [])
            ],
            validators=[
                construct_validator(val) for val in declaration.get("validators", [])
            ],
            wire_name=declaration.get("wireName"),
            description=declaration.get("description", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Get the data declaration for this node, omitting defaults"""
        declaration = {"name": self._name}
        if self._wire_name != to_camel_case(self._name):
            declaration["wireName"] = self._wire_name
        declaration["type"] = self._kind.value
        if not self.is_optional:
            declaration["cardinality"] = self._cardinality.value
        if self._description:
            declaration["description"] = self._description
        if self._validators:
            declaration["validators"] = [val.to_dict() for val in self._validators]
        if self._children:
            declaration["attributes"] = [child.to_dict() for child in self._children]
        return declaration

    def __repr__(self):
        return (
            f"AttributeSchema({self._name}, {self._kind.value}, "
            f"{self._cardinality.value}, children={len(self._children)})"
        )


## KindSchema ##################################################################


def _computed_attribute(name: str, kind: AttributeKind, description: str):
    return AttributeSchema(
        name=name,
        kind=kind,
        cardinality=Cardinality.COMPUTED,
        description=description,
    )


def _metadata_attribute(namespaced: bool) -> AttributeSchema:
    """Build the standard metadata block shared by every kind"""
    children = [
        AttributeSchema(
            name="name",
            kind=AttributeKind.STRING,
            cardinality=Cardinality.REQUIRED,
            validators=[NameValidator()],
            description="Unique identifier for this object.",
        )
    ]
    if namespaced:
        children.append(
            AttributeSchema(
                name="namespace",
                kind=AttributeKind.STRING,
                validators=[NameValidator()],
                description="Namespace in which this object lives.",
            )
        )
    children.extend(
        [
            AttributeSchema(
                name="labels",
                kind=AttributeKind.MAP,
                validators=[LabelsValidator()],
                description="Keys and values used to organize and categorize objects.",
            ),
            AttributeSchema(
                name="annotations",
                kind=AttributeKind.MAP,
                validators=[AnnotationsValidator()],
                description=(
                    "Keys and values used by external tooling to store arbitrary "
                    "metadata."
                ),
            ),
        ]
    )
    return AttributeSchema(
        name=constants.METADATA_ATTRIBUTE,
        kind=AttributeKind.OBJECT,
        cardinality=Cardinality.REQUIRED,
        children=children,
        description="Data that helps uniquely identify this object.",
    )


# Attribute names which every kind defines at its root
RESERVED_ATTRIBUTES = frozenset(
    [
        constants.ID_ATTRIBUTE,
        constants.YAML_ATTRIBUTE,
        constants.API_VERSION_ATTRIBUTE,
        constants.KIND_ATTRIBUTE,
        constants.METADATA_ATTRIBUTE,
    ]
)


class KindSchema:
    """The full schema for one resource kind"""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        group: str,
        version: str,
        kind: str,
        body: Iterable[AttributeSchema],
        namespaced: bool = True,
        description: str = "",
    ):
        """Construct the root schema for a kind

        Args:
            group:  str
                The API group ("" for the core group)
            version:  str
                The API version within the group
            kind:  str
                The kubernetes kind (e.g. PodMonitor)
            body:  Iterable[AttributeSchema]
                The top-level body attributes rendered after metadata (commonly
                a single "spec" attribute)
            namespaced:  bool
                Whether objects of this kind live in a namespace
            description:  str
                Human readable description of the kind
        """
        body = tuple(body)
        assert_schema(bool(version), "Kinds must have a version")
        assert_schema(bool(kind), "Kinds must have a kind name")
        for node in body:
            assert_schema(
                node.name not in RESERVED_ATTRIBUTES,
                f"Body attribute [{node.name}] of {kind} uses a reserved name",
            )
            assert_schema(
                not node.is_computed,
                f"Body attribute [{node.name}] of {kind} cannot be computed",
            )
        self._group = group or ""
        self._version = version
        self._kind = kind
        self._body = body
        self._namespaced = namespaced
        self._description = description
        self._root = AttributeSchema(
            name=self.type_name,
            kind=AttributeKind.OBJECT,
            cardinality=Cardinality.REQUIRED,
            children=[
                _computed_attribute(
                    constants.ID_ATTRIBUTE,
                    AttributeKind.INT,
                    "The timestamp of the last change to this resource.",
                ),
                _computed_attribute(
                    constants.YAML_ATTRIBUTE,
                    AttributeKind.STRING,
                    "The generated manifest in YAML format.",
                ),
                _computed_attribute(
                    constants.API_VERSION_ATTRIBUTE,
                    AttributeKind.STRING,
                    "The versioned schema of this representation of an object.",
                ),
                _computed_attribute(
                    constants.KIND_ATTRIBUTE,
                    AttributeKind.STRING,
                    "The REST resource this object represents.",
                ),
                _metadata_attribute(namespaced),
                *body,
            ],
            description=description,
        )
        log.debug2("Constructed schema for %s", self.type_name)

    ## Properties ##############################################################

    @property
    def group(self) -> str:
        return self._group

    @property
    def version(self) -> str:
        return self._version

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def namespaced(self) -> bool:
        return self._namespaced

    @property
    def description(self) -> str:
        return self._description

    @property
    def api_version(self) -> str:
        if self._group:
            return f"{self._group}/{self._version}"
        return self._version

    @property
    def type_name(self) -> str:
        """The resource type name, e.g. k8s_monitoring_coreos_com_pod_monitor_v1"""
        parts = [constants.TYPE_NAME_PREFIX]
        if self._group:
            parts.append(to_snake_case(self._group.replace(".", "_")))
        parts.append(to_snake_case(self._kind))
        parts.append(self._version)
        return "_".join(parts)

    @property
    def root(self) -> AttributeSchema:
        return self._root

    @property
    def body(self) -> tuple:
        return self._body

    @property
    def body_fields(self) -> List[str]:
        """Wire names of the top-level body fields in render order"""
        return [node.wire_name for node in self._body]

    ## Lookup ##################################################################

    def describe(self, path: str) -> AttributeSchema:
        """Resolve a dotted attribute path to its schema node. Positional
        indices (spec.tags[2].key) are accepted and ignored.

        Raises:
            KeyError: If the path does not name an attribute of this kind
        """
        node = self._root
        parts = split_path(path)
        if not parts:
            raise KeyError(f"Empty attribute path for {self.type_name}")
        for part in parts:
            if not node.is_nested:
                raise KeyError(
                    f"Attribute [{node.name}] of {self.type_name} has no children"
                )
            node = node.child(part)
        return node

    ## Data ####################################################################

    @classmethod
    def from_dict(cls, declaration: Dict[str, Any]) -> "KindSchema":
        """Construct a kind from a data declaration of the form:

            group: monitoring.coreos.com
            version: v1
            kind: PodMonitor
            namespaced: true
            description: ...
            attributes:
              - name: spec
                type: object
                attributes: [...]
        """
        assert_schema(
            isinstance(declaration, dict), f"Invalid kind declaration: {declaration}"
        )
        return cls(
            group=declaration.get("group", ""),
            version=declaration.get("version"),
            kind=declaration.get("kind"),
            body=[
                AttributeSchema.from_dict(node)
                for node in declaration.get("attributes", [])
            ],
            namespaced=declaration.get("namespaced", True),
            description=declaration.get("description", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Get the data declaration for this kind"""
        declaration = {
            "group": self._group,
            "version": self._version,
            "kind": self._kind,
            "namespaced": self._namespaced,
        }
        if self._description:
            declaration["description"] = self._description
        declaration["attributes"] = [node.to_dict() for node in self._body]
        return declaration

    def __repr__(self):
        return f"KindSchema({self.api_version}, {self._kind})"
