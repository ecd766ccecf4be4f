"""
Tests for generating kind schemas from CustomResourceDefinitions
"""

# Standard
import os

# Third Party
import pytest
import yaml

# Local
from kubemanifest.adapter import ManifestAdapter
from kubemanifest.binder import bind
from kubemanifest.crd import kind_schemas_from_crd, load_crd_file
from kubemanifest.exceptions import SchemaError, ValidationFailed
from kubemanifest.schema import AttributeKind, KindSchema
from kubemanifest.test_helpers.helpers import TEST_DATA_DIR
from kubemanifest.validators import (
    Base64Validator,
    DateTimeValidator,
    LengthValidator,
    OneOfValidator,
    RangeValidator,
    RegexValidator,
)

CRD_FILE = os.path.join(TEST_DATA_DIR, "widget_crd.yaml")


@pytest.fixture
def widget():
    return load_crd_file(CRD_FILE)[0]


def test_load_crd_file():
    """Make sure only served versions of every CRD are converted"""
    kinds = load_crd_file(CRD_FILE)
    assert [kind.type_name for kind in kinds] == [
        "k8s_example_com_widget_v1",
        "k8s_example_com_gadget_v1",
    ]
    widget, gadget = kinds
    assert widget.namespaced
    assert not gadget.namespaced
    assert widget.api_version == "example.com/v1"
    assert widget.description == "Widget is an example resource"


def test_body_excludes_status_and_envelope(widget):
    assert widget.body_fields == ["spec"]
    assert widget.root.child("spec").is_required


def test_properties_sorted_and_renamed(widget):
    spec = widget.root.child("spec")
    assert [child.wire_name for child in spec.children] == [
        "annotations",
        "caBundle",
        "config",
        "counts",
        "enabled",
        "hosts",
        "port",
        "ports",
        "ratio",
        "replicas",
        "selector",
        "serviceAccountName",
        "size",
        "startedAt",
    ]
    assert spec.child("service_account_name").wire_name == "serviceAccountName"
    assert spec.child("ca_bundle").wire_name == "caBundle"


@pytest.mark.parametrize(
    ["path", "kind"],
    [
        ("spec.annotations", AttributeKind.MAP),
        ("spec.ca_bundle", AttributeKind.STRING),
        ("spec.config", AttributeKind.DYNAMIC),
        ("spec.counts", AttributeKind.DYNAMIC),
        ("spec.enabled", AttributeKind.BOOL),
        ("spec.hosts", AttributeKind.LIST),
        ("spec.port", AttributeKind.INT_OR_STRING),
        ("spec.ports", AttributeKind.LIST_OF_OBJECTS),
        ("spec.ports.container_port", AttributeKind.INT),
        ("spec.ratio", AttributeKind.FLOAT),
        ("spec.replicas", AttributeKind.INT),
        ("spec.selector", AttributeKind.OBJECT),
        ("spec.selector.match_labels", AttributeKind.MAP),
        ("spec.size", AttributeKind.STRING),
        ("spec.started_at", AttributeKind.STRING),
    ],
)
def test_property_kinds(widget, path, kind):
    assert widget.describe(path).kind is kind


def test_required_lists(widget):
    assert widget.describe("spec.size").is_required
    assert widget.describe("spec.ports.name").is_required
    assert widget.describe("spec.ports.container_port").is_optional
    assert widget.describe("spec.replicas").is_optional


def test_validators(widget):
    assert widget.describe("spec.size").validators == (
        OneOfValidator(values=["small", "large"]),
    )
    assert widget.describe("spec.replicas").validators == (
        RangeValidator(min=1, max=5),
    )
    assert widget.describe("spec.service_account_name").validators == (
        RegexValidator(pattern="^[a-z]+$"),
        LengthValidator(min_len=1, max_len=10),
    )
    assert widget.describe("spec.ca_bundle").validators == (Base64Validator(),)
    assert widget.describe("spec.started_at").validators == (DateTimeValidator(),)
    assert widget.describe("spec.hosts").validators == (LengthValidator(max_len=3),)


def test_converted_kind_renders(widget):
    """Make sure a converted kind binds and renders with CRD wire names"""
    manifest = ManifestAdapter(widget).read(
        {
            "metadata": {"name": "w1"},
            "spec": {
                "size": "small",
                "ca_bundle": "aGVsbG8=",
                "port": "http",
                "ports": [{"name": "web", "container_port": 80}],
                "config": {"anything": {"goes": [1]}},
            },
        }
    )
    assert yaml.safe_load(manifest)["spec"] == {
        "caBundle": "aGVsbG8=",
        "config": {"anything": {"goes": [1]}},
        "port": "http",
        "ports": [{"containerPort": 80, "name": "web"}],
        "size": "small",
    }


def test_converted_kind_checks_date_times(widget):
    """Make sure date-time formatted strings are validated when bound"""
    config = {"metadata": {"name": "w1"}, "spec": {"size": "small"}}
    config["spec"]["started_at"] = "2024-05-01T12:00:00Z"
    _, failures = bind(widget, config)
    assert failures == []

    config["spec"]["started_at"] = "yesterday"
    _, failures = bind(widget, config)
    assert len(failures) == 1
    assert isinstance(failures[0], ValidationFailed)
    assert failures[0].path == "spec.started_at"
    assert failures[0].validator == "date_time"


def test_converted_kind_round_trips(widget):
    """Make sure a converted kind can be written as a declaration"""
    rebuilt = KindSchema.from_dict(widget.to_dict())
    assert rebuilt.to_dict() == widget.to_dict()


def test_preserve_unknown_fields_with_properties():
    """Make sure objects that keep unknown fields stay dynamic"""
    kinds = kind_schemas_from_crd(
        {
            "kind": "CustomResourceDefinition",
            "spec": {
                "group": "example.com",
                "names": {"kind": "Thing"},
                "versions": [
                    {
                        "name": "v1",
                        "schema": {
                            "openAPIV3Schema": {
                                "properties": {
                                    "spec": {
                                        "type": "object",
                                        "x-kubernetes-preserve-unknown-fields": True,
                                        "properties": {"a": {"type": "string"}},
                                    }
                                }
                            }
                        },
                    }
                ],
            },
        }
    )
    assert kinds[0].describe("spec").kind is AttributeKind.DYNAMIC


@pytest.mark.parametrize(
    "manifest",
    [
        {"kind": "Deployment"},
        {"kind": "CustomResourceDefinition", "spec": {"group": "a.b"}},
        "nope",
    ],
)
def test_not_a_crd(manifest):
    with pytest.raises(SchemaError):
        kind_schemas_from_crd(manifest)


def test_invalid_yaml(tmp_path):
    bad_file = tmp_path / "crd.yaml"
    bad_file.write_text("spec: [unclosed\n")
    with pytest.raises(SchemaError):
        load_crd_file(str(bad_file))
