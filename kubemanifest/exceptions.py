"""
This module implements custom exceptions
"""

# Standard
from typing import List, Optional

## Base Error ##################################################################


class KubeManifestError(Exception):
    """Base class for all kubemanifest exceptions"""

    def __init__(self, message: str, is_fatal_error: bool):
        """Construct with a flag indicating whether this is a fatal error. This
        will be a static property of all children.
        """
        super().__init__(message)
        self._is_fatal_error = is_fatal_error

    @property
    def is_fatal_error(self):
        """Property indicating whether or not this error should abort the
        operation as a defect rather than as a user configuration problem
        """
        return self._is_fatal_error


## Fatal Errors ################################################################


class KubeManifestFatalError(KubeManifestError):
    """A KubeManifestFatalError indicates a defect in a schema declaration or
    in the library itself. It aborts the single operation in which it occurs.
    """

    def __init__(self, message: str = ""):
        super().__init__(message=message, is_fatal_error=True)


class InternalInconsistency(KubeManifestFatalError):
    """Exception raised when a bound model does not match the schema it was
    bound against
    """


class SchemaError(KubeManifestFatalError):
    """Exception raised when a schema declaration is malformed"""


class RegistryError(KubeManifestFatalError):
    """Exception raised when looking up an unknown kind or registering a kind
    twice
    """


## Expected Errors #############################################################


class KubeManifestExpectedError(KubeManifestError):
    """A KubeManifestExpectedError is caused by user-supplied configuration and
    is resolved by changing that configuration.
    """

    def __init__(self, message: str = ""):
        super().__init__(message=message, is_fatal_error=False)


class BindingFailure(KubeManifestExpectedError):
    """Base for a single problem found while binding configuration. Every
    failure carries the dotted path of the offending attribute.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)

    def __eq__(self, other):
        return type(self) is type(other) and str(self) == str(other)

    def __hash__(self):
        return hash((type(self).__name__, str(self)))


class MissingRequiredField(BindingFailure):
    """A required attribute was not supplied"""

    def __init__(self, path: str):
        super().__init__(path, "required attribute is missing")


class TypeMismatch(BindingFailure):
    """A supplied value could not be coerced to the declared kind"""

    def __init__(self, path: str, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(path, f"expected {expected}, got {actual}")


class ValidationFailed(BindingFailure):
    """A validator attached to an attribute rejected the bound value"""

    def __init__(self, path: str, validator: str, detail: str):
        self.validator = validator
        self.detail = detail
        super().__init__(path, f"[{validator}] {detail}")


class UnknownField(BindingFailure):
    """An attribute that is not declared in the schema was supplied"""

    def __init__(self, path: str):
        super().__init__(path, "unknown attribute")


class ConfigurationError(KubeManifestExpectedError):
    """Composite error holding every failure found in a single binding pass"""

    def __init__(self, failures: List[BindingFailure], type_name: Optional[str] = None):
        self.failures = list(failures)
        self.type_name = type_name
        header = "Invalid configuration"
        if type_name:
            header += f" for {type_name}"
        lines = [f"{header} ({len(self.failures)} problem(s)):"]
        lines.extend(f"  - {failure}" for failure in self.failures)
        super().__init__("\n".join(lines))


## Assertions ##################################################################


def assert_consistent(condition: bool, message: str = ""):
    """Replacement for assert() which will throw an InternalInconsistency. This
    should be used when a bound model is walked under the assumption that it
    matches its schema.
    """
    if not condition:
        raise InternalInconsistency(message)


def assert_schema(condition: bool, message: str = ""):
    """Replacement for assert() which will throw a SchemaError. This should be
    used when constructing schema nodes from declarations.
    """
    if not condition:
        raise SchemaError(message)
