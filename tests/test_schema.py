"""
Tests for the attribute and kind schemas
"""

# Third Party
import pytest

# Local
from kubemanifest.exceptions import SchemaError
from kubemanifest.schema import (
    RESERVED_ATTRIBUTES,
    AttributeKind,
    AttributeSchema,
    Cardinality,
    KindSchema,
)
from kubemanifest.test_helpers.helpers import sample_kind
from kubemanifest.validators import OneOfValidator, RangeValidator

#####################
## AttributeSchema ##
#####################


def test_attribute_defaults():
    """Make sure an attribute defaults to optional with a camelCase wire name"""
    node = AttributeSchema("node_count", AttributeKind.INT)
    assert node.is_optional
    assert not node.is_required
    assert not node.is_computed
    assert not node.is_nested
    assert node.wire_name == "nodeCount"
    assert node.children == ()
    assert node.validators == ()


def test_attribute_explicit_wire_name():
    node = AttributeSchema(
        "subscription_id", AttributeKind.STRING, wire_name="subscriptionID"
    )
    assert node.wire_name == "subscriptionID"


def test_nested_requires_children():
    with pytest.raises(SchemaError):
        AttributeSchema("auth", AttributeKind.OBJECT)
    with pytest.raises(SchemaError):
        AttributeSchema("tags", AttributeKind.LIST_OF_OBJECTS, children=[])


def test_leaf_rejects_children():
    with pytest.raises(SchemaError):
        AttributeSchema(
            "engine",
            AttributeKind.STRING,
            children=[AttributeSchema("a", AttributeKind.STRING)],
        )


def test_duplicate_children_rejected():
    """Make sure siblings may not share a name or a wire name"""
    with pytest.raises(SchemaError):
        AttributeSchema(
            "spec",
            AttributeKind.OBJECT,
            children=[
                AttributeSchema("a", AttributeKind.STRING),
                AttributeSchema("a", AttributeKind.INT),
            ],
        )
    with pytest.raises(SchemaError):
        AttributeSchema(
            "spec",
            AttributeKind.OBJECT,
            children=[
                AttributeSchema("a", AttributeKind.STRING, wire_name="x"),
                AttributeSchema("b", AttributeKind.STRING, wire_name="x"),
            ],
        )


@pytest.mark.parametrize("bad_name", ["", None, 3])
def test_invalid_name(bad_name):
    with pytest.raises(SchemaError):
        AttributeSchema(bad_name, AttributeKind.STRING)


def test_invalid_kind_and_cardinality():
    with pytest.raises(SchemaError):
        AttributeSchema("a", "string")
    with pytest.raises(SchemaError):
        AttributeSchema("a", AttributeKind.STRING, cardinality="required")


def test_child_lookup():
    node = AttributeSchema(
        "spec",
        AttributeKind.OBJECT,
        children=[AttributeSchema("engine", AttributeKind.STRING)],
    )
    assert node.is_nested
    assert node.has_child("engine")
    assert node.child("engine").name == "engine"
    assert not node.has_child("nope")
    with pytest.raises(KeyError):
        node.child("nope")


def test_attribute_from_dict():
    """Make sure a declaration builds the full node tree"""
    node = AttributeSchema.from_dict(
        {
            "name": "tags",
            "type": "list_of_objects",
            "cardinality": "required",
            "description": "Tags to apply",
            "validators": [{"type": "length", "max_len": 10}],
            "attributes": [
                {"name": "key", "type": "string", "cardinality": "required"},
                {"name": "value", "type": "string", "wireName": "Value"},
            ],
        }
    )
    assert node.kind is AttributeKind.LIST_OF_OBJECTS
    assert node.is_required
    assert node.description == "Tags to apply"
    assert len(node.validators) == 1
    assert [child.name for child in node.children] == ["key", "value"]
    assert node.child("key").is_required
    assert node.child("value").is_optional
    assert node.child("value").wire_name == "Value"


@pytest.mark.parametrize(
    "declaration",
    [
        {"name": "a", "type": "bogus"},
        {"name": "a", "type": "string", "cardinality": "sometimes"},
        {"name": "a", "type": "string", "validators": [{"type": "bogus"}]},
        ["not", "a", "map"],
    ],
)
def test_attribute_from_dict_invalid(declaration):
    with pytest.raises(SchemaError):
        AttributeSchema.from_dict(declaration)


def test_attribute_dict_round_trip():
    """Make sure to_dict writes a declaration that builds the same node"""
    declaration = {
        "name": "subscription_id",
        "wireName": "subscriptionID",
        "type": "string",
        "cardinality": "required",
        "validators": [{"type": "one_of", "values": ["a", "b"]}],
    }
    node = AttributeSchema.from_dict(declaration)
    assert node.to_dict() == declaration
    assert node.validators == (OneOfValidator(values=["a", "b"]),)


################
## KindSchema ##
################


def test_kind_identity():
    kind = sample_kind()
    assert kind.group == "cache.example.com"
    assert kind.version == "v1"
    assert kind.kind == "CacheGroup"
    assert kind.api_version == "cache.example.com/v1"
    assert kind.type_name == "k8s_cache_example_com_cache_group_v1"
    assert kind.namespaced


def test_core_group_kind():
    """Make sure core group kinds omit the group everywhere"""
    kind = KindSchema(
        group="",
        version="v1",
        kind="PersistentVolume",
        namespaced=False,
        body=[
            AttributeSchema(
                "spec",
                AttributeKind.OBJECT,
                children=[AttributeSchema("storage_class_name", AttributeKind.STRING)],
            )
        ],
    )
    assert kind.api_version == "v1"
    assert kind.type_name == "k8s_persistent_volume_v1"


def test_root_layout():
    """Make sure the root holds the computed attributes, metadata, then the
    body in declaration order
    """
    kind = sample_kind()
    root = kind.root
    assert root.name == kind.type_name
    assert [child.name for child in root.children] == [
        "id",
        "yaml",
        "api_version",
        "kind",
        "metadata",
        "spec",
    ]
    assert all(root.child(name).is_computed for name in ["id", "yaml", "kind"])
    assert root.child("api_version").is_computed
    assert root.child("id").kind is AttributeKind.INT
    assert root.child("metadata").is_required
    assert [node.name for node in kind.body] == ["spec"]
    assert kind.body_fields == ["spec"]


def test_metadata_namespaced():
    metadata = sample_kind().root.child("metadata")
    assert [child.name for child in metadata.children] == [
        "name",
        "namespace",
        "labels",
        "annotations",
    ]
    assert metadata.child("name").is_required
    assert metadata.child("namespace").is_optional
    assert metadata.child("labels").kind is AttributeKind.MAP


def test_metadata_cluster_scoped():
    """Make sure cluster scoped kinds have no namespace"""
    metadata = sample_kind(namespaced=False).root.child("metadata")
    assert not metadata.has_child("namespace")


def test_non_spec_body_field():
    kind = sample_kind(body_field="configuration")
    assert kind.body_fields == ["configuration"]
    assert kind.describe("configuration.engine").name == "engine"


@pytest.mark.parametrize("reserved", sorted(RESERVED_ATTRIBUTES))
def test_reserved_body_names(reserved):
    with pytest.raises(SchemaError):
        KindSchema(
            group="example.com",
            version="v1",
            kind="Widget",
            body=[AttributeSchema(reserved, AttributeKind.STRING)],
        )


def test_computed_body_rejected():
    with pytest.raises(SchemaError):
        KindSchema(
            group="example.com",
            version="v1",
            kind="Widget",
            body=[
                AttributeSchema(
                    "status", AttributeKind.STRING, cardinality=Cardinality.COMPUTED
                )
            ],
        )


def test_missing_version_or_kind():
    with pytest.raises(SchemaError):
        KindSchema(group="example.com", version="", kind="Widget", body=[])
    with pytest.raises(SchemaError):
        KindSchema(group="example.com", version="v1", kind="", body=[])


def test_describe():
    """Make sure dotted paths (with or without indices) resolve to nodes"""
    kind = sample_kind()
    assert kind.describe("spec.engine").kind is AttributeKind.STRING
    assert kind.describe("spec.tags[2].key").name == "key"
    assert kind.describe("spec.tags.value").name == "value"
    assert kind.describe("metadata.name").is_required
    node = kind.describe("spec.node_count")
    assert node.validators == (RangeValidator(min=1, max=10),)


@pytest.mark.parametrize(
    "path", ["", "spec.nope", "nope", "spec.engine.deeper", "spec.tags[0].nope"]
)
def test_describe_unknown(path):
    with pytest.raises(KeyError):
        sample_kind().describe(path)


def test_kind_dict_round_trip():
    """Make sure a kind survives being written out and read back"""
    kind = sample_kind(namespaced=False)
    declaration = kind.to_dict()
    assert declaration["group"] == "cache.example.com"
    assert declaration["namespaced"] is False
    rebuilt = KindSchema.from_dict(declaration)
    assert rebuilt.type_name == kind.type_name
    assert rebuilt.to_dict() == declaration
    assert not rebuilt.root.child("metadata").has_child("namespace")


def test_kind_from_dict_defaults():
    kind = KindSchema.from_dict(
        {
            "version": "v1",
            "kind": "ConfigMap",
            "attributes": [{"name": "data", "type": "map"}],
        }
    )
    assert kind.group == ""
    assert kind.namespaced
    assert kind.body_fields == ["data"]


def test_kind_from_dict_invalid():
    with pytest.raises(SchemaError):
        KindSchema.from_dict("nope")
