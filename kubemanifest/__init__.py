"""
Package exports
"""

# Local
from . import config, validators
from .adapter import ManifestAdapter, ResourceAdapter, ResourceState
from .binder import bind
from .bound_model import ABSENT, BoundObject
from .crd import kind_schemas_from_crd, load_crd_file
from .exceptions import (
    BindingFailure,
    ConfigurationError,
    InternalInconsistency,
    MissingRequiredField,
    RegistryError,
    SchemaError,
    TypeMismatch,
    UnknownField,
    ValidationFailed,
)
from .int_or_string import IntOrString
from .registry import KindRegistry
from .schema import AttributeKind, AttributeSchema, Cardinality, KindSchema
from .serializer import render
from .stamper import stamp
