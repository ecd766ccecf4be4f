"""
Test the custom exceptions and assert functions
"""

# Third Party
import pytest

# Local
from kubemanifest import exceptions


def test_assert_consistent_pass():
    """Make sure that no exception is throw by assert_consistent when it
    passes
    """
    exceptions.assert_consistent(True)


def test_assert_consistent_fail():
    """Make sure the right exception is thrown by assert_consistent when it
    fails
    """
    exception_msg = "error mesage"
    with pytest.raises(exceptions.InternalInconsistency, match=exception_msg):
        exceptions.assert_consistent(False, exception_msg)


def test_assert_schema_fail():
    """Make sure the right exception is thrown by assert_schema when it fails"""
    exception_msg = "bad declaration"
    with pytest.raises(exceptions.SchemaError, match=exception_msg):
        exceptions.assert_schema(False, exception_msg)
    exceptions.assert_schema(True)


def test_exception_derived_from_base():
    """Make sure every error is a KubeManifestError with the right fatality"""
    for error in [
        exceptions.InternalInconsistency(),
        exceptions.SchemaError(),
        exceptions.RegistryError(),
    ]:
        assert isinstance(error, exceptions.KubeManifestFatalError)
        assert error.is_fatal_error

    for error in [
        exceptions.MissingRequiredField("a"),
        exceptions.TypeMismatch("a", "int", "string"),
        exceptions.ValidationFailed("a", "range", "must be at least 1"),
        exceptions.UnknownField("a"),
        exceptions.ConfigurationError([]),
    ]:
        assert isinstance(error, exceptions.KubeManifestExpectedError)
        assert isinstance(error, exceptions.KubeManifestError)
        assert not error.is_fatal_error


def test_binding_failure_messages():
    """Make sure each failure renders its path and detail"""
    assert str(exceptions.MissingRequiredField("spec.engine")) == (
        "spec.engine: required attribute is missing"
    )
    mismatch = exceptions.TypeMismatch("spec.port", "int", "string")
    assert str(mismatch) == "spec.port: expected int, got string"
    assert mismatch.expected == "int"
    assert mismatch.actual == "string"
    failed = exceptions.ValidationFailed("spec.size", "one_of", "must be one of [a]")
    assert str(failed) == "spec.size: [one_of] must be one of [a]"
    assert failed.validator == "one_of"
    assert str(exceptions.UnknownField("spec.nope")) == "spec.nope: unknown attribute"


def test_binding_failure_equality():
    """Make sure failures compare by type and content"""
    assert exceptions.MissingRequiredField("a") == exceptions.MissingRequiredField("a")
    assert exceptions.MissingRequiredField("a") != exceptions.MissingRequiredField("b")
    assert exceptions.UnknownField("a") != exceptions.MissingRequiredField("a")
    assert len({exceptions.UnknownField("a"), exceptions.UnknownField("a")}) == 1


def test_configuration_error_lists_all_failures():
    """Make sure the composite error holds and reports every failure"""
    failures = [
        exceptions.MissingRequiredField("metadata.name"),
        exceptions.TypeMismatch("spec.replicas", "int", "string"),
    ]
    err = exceptions.ConfigurationError(failures, "k8s_example_com_widget_v1")
    assert err.failures == failures
    assert err.type_name == "k8s_example_com_widget_v1"
    lines = str(err).splitlines()
    assert lines[0] == (
        "Invalid configuration for k8s_example_com_widget_v1 (2 problem(s)):"
    )
    assert lines[1] == "  - metadata.name: required attribute is missing"
    assert lines[2] == "  - spec.replicas: expected int, got string"
