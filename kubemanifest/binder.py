"""
The binder reads a raw configuration value tree against a schema and produces
a BoundObject. Every problem in the tree is collected so that the caller sees
them all in a single pass.
"""

# Standard
from typing import Any, List, Mapping, Optional, Tuple, Union
import copy

# First Party
import alog

# Local
from . import config
from .bound_model import ABSENT, BoundObject
from .exceptions import (
    BindingFailure,
    MissingRequiredField,
    TypeMismatch,
    UnknownField,
    ValidationFailed,
)
from .int_or_string import IntOrString
from .schema import AttributeKind, AttributeSchema, KindSchema
from .utils import describe_shape, index_path, join_path

log = alog.use_channel("BIND")

# Validator name reported when a computed attribute is configured
COMPUTED_VALIDATOR_NAME = "computed"

## Public ######################################################################


def bind(
    schema: Union[KindSchema, AttributeSchema],
    raw_config: Optional[Mapping[str, Any]],
    allow_unknown_fields: Optional[bool] = None,
) -> Tuple[BoundObject, List[BindingFailure]]:
    """Bind raw configuration against a schema

    Args:
        schema:  Union[KindSchema, AttributeSchema]
            The kind (or bare object node) to bind against
        raw_config:  Optional[Mapping[str, Any]]
            The decoded configuration tree keyed by attribute name. None values
            are treated as not supplied.
        allow_unknown_fields:  Optional[bool]
            Whether undeclared keys are ignored instead of reported. Defaults to
            the binding.allow_unknown_fields library config.

    Returns:
        bound:  BoundObject
            The bound model. Attributes that failed to bind are left ABSENT.
        failures:  List[BindingFailure]
            Every failure found, in schema pre-order
    """
    node = schema.root if isinstance(schema, KindSchema) else schema
    if allow_unknown_fields is None:
        allow_unknown_fields = config.binding.allow_unknown_fields

    binder = _Binder(allow_unknown_fields=allow_unknown_fields)
    bound = binder.bind_object(node, {} if raw_config is None else raw_config, "")
    if bound is None:
        bound = BoundObject(node)

    log.debug2("Bound [%s] with %d failure(s)", node.name, len(binder.failures))
    return bound, binder.failures


## Implementation ##############################################################

# Marker for a value whose own coercion failed
_INVALID = object()


class _Binder:
    """Holds the accumulated failures for one binding pass"""

    def __init__(self, allow_unknown_fields: bool):
        self.allow_unknown_fields = allow_unknown_fields
        self.failures = []

    def fail(self, failure: BindingFailure):
        log.debug3("Binding failure: %s", failure)
        self.failures.append(failure)

    ## Objects #################################################################

    def bind_object(
        self,
        node: AttributeSchema,
        raw: Any,
        path: str,
    ) -> Optional[BoundObject]:
        """Bind a mapping against the children of an object node"""
        if not isinstance(raw, Mapping):
            self.fail(TypeMismatch(path, "object", describe_shape(raw)))
            return None

        if not self.allow_unknown_fields:
            for key in raw:
                if not node.has_child(key):
                    self.fail(UnknownField(join_path(path, str(key))))

        bound = BoundObject(node)
        for child in node.children:
            bound[child.name] = self.bind_attribute(
                child, raw.get(child.name), join_path(path, child.name)
            )
        return bound

    ## Attributes ##############################################################

    def bind_attribute(self, node: AttributeSchema, raw: Any, path: str) -> Any:
        """Bind a single attribute, recording failures and returning ABSENT
        when nothing could be bound
        """
        if raw is None:
            if node.is_required:
                self.fail(MissingRequiredField(path))
            return ABSENT

        if node.is_computed:
            self.fail(
                ValidationFailed(
                    path,
                    COMPUTED_VALIDATOR_NAME,
                    "attribute is computed and cannot be configured",
                )
            )
            return ABSENT

        log.debug4("Binding [%s] as %s", path, node.kind.value)
        value = self.coerce(node, raw, path)
        if value is _INVALID:
            return ABSENT

        for validator in node.validators:
            for violation in validator(value):
                self.fail(ValidationFailed(path, validator.name, violation))
        return value

    def coerce(  # pylint: disable=too-many-return-statements
        self,
        node: AttributeSchema,
        raw: Any,
        path: str,
    ) -> Any:
        """Coerce a raw value to the node's kind. Returns _INVALID if the value
        itself could not be coerced. Failures inside nested objects are
        recorded without invalidating the enclosing value.
        """
        kind = node.kind
        if kind is AttributeKind.STRING:
            return self._coerce_scalar(raw, path, str, kind)
        if kind is AttributeKind.BOOL:
            return self._coerce_scalar(raw, path, bool, kind)
        if kind is AttributeKind.INT:
            if isinstance(raw, float) and raw.is_integer():
                return int(raw)
            return self._coerce_scalar(raw, path, int, kind)
        if kind is AttributeKind.FLOAT:
            if isinstance(raw, int) and not isinstance(raw, bool):
                return float(raw)
            return self._coerce_scalar(raw, path, float, kind)
        if kind is AttributeKind.INT_OR_STRING:
            try:
                return IntOrString.from_value(raw, path)
            except TypeMismatch as err:
                self.fail(err)
                return _INVALID
        if kind is AttributeKind.MAP:
            return self._coerce_map(raw, path)
        if kind is AttributeKind.LIST:
            return self._coerce_list(raw, path)
        if kind is AttributeKind.OBJECT:
            bound = self.bind_object(node, raw, path)
            return _INVALID if bound is None else bound
        if kind is AttributeKind.LIST_OF_OBJECTS:
            return self._coerce_list_of_objects(node, raw, path)
        if kind is AttributeKind.DYNAMIC:
            return self._coerce_dynamic(raw, path)

        # Every AttributeKind is handled above
        raise NotImplementedError(f"Unhandled attribute kind {kind}")

    ## Coercion helpers ########################################################

    def _coerce_scalar(self, raw: Any, path: str, typ: type, kind: AttributeKind):
        # bool is a subclass of int, so it needs an explicit exclusion
        if not isinstance(raw, typ) or (typ is not bool and isinstance(raw, bool)):
            self.fail(TypeMismatch(path, kind.value, describe_shape(raw)))
            return _INVALID
        return raw

    def _coerce_map(self, raw: Any, path: str) -> Any:
        """Maps may arrive as mappings or as non-empty sequences of key/value
        pairs (the shape produced by ordered YAML maps). Duplicate keys are
        rejected. An empty map must be given as a mapping since an empty list
        carries no pairs to tell it apart from a list.
        """
        expected = AttributeKind.MAP.value
        if isinstance(raw, Mapping):
            pairs = list(raw.items())
        elif isinstance(raw, (list, tuple)) and raw and all(
            isinstance(pair, (list, tuple)) and len(pair) == 2 for pair in raw
        ):
            pairs = [tuple(pair) for pair in raw]
        else:
            self.fail(TypeMismatch(path, expected, describe_shape(raw)))
            return _INVALID

        num_failures = len(self.failures)
        result = {}
        for key, val in pairs:
            if not isinstance(key, str):
                self.fail(TypeMismatch(path, "string keys", describe_shape(key)))
                continue
            entry_path = join_path(path, key)
            if key in result:
                self.fail(TypeMismatch(entry_path, expected, "duplicate key"))
                continue
            if not isinstance(val, str):
                self.fail(TypeMismatch(entry_path, "string", describe_shape(val)))
                continue
            result[key] = val
        return _INVALID if len(self.failures) > num_failures else result

    def _coerce_list(self, raw: Any, path: str) -> Any:
        if not isinstance(raw, (list, tuple)):
            self.fail(TypeMismatch(path, AttributeKind.LIST.value, describe_shape(raw)))
            return _INVALID
        valid = True
        for idx, element in enumerate(raw):
            if not isinstance(element, str):
                self.fail(
                    TypeMismatch(
                        index_path(path, idx), "string", describe_shape(element)
                    )
                )
                valid = False
        return list(raw) if valid else _INVALID

    def _coerce_list_of_objects(self, node: AttributeSchema, raw: Any, path: str):
        if not isinstance(raw, (list, tuple)):
            self.fail(
                TypeMismatch(
                    path, AttributeKind.LIST_OF_OBJECTS.value, describe_shape(raw)
                )
            )
            return _INVALID
        result = []
        for idx, element in enumerate(raw):
            bound = self.bind_object(node, element, index_path(path, idx))
            result.append(BoundObject(node) if bound is None else bound)
        return result

    def _coerce_dynamic(self, raw: Any, path: str) -> Any:
        """Dynamic values may hold any JSON-shaped data"""
        num_failures = len(self.failures)
        self._check_dynamic(raw, path)
        if len(self.failures) > num_failures:
            return _INVALID
        return copy.deepcopy(_plain(raw))

    def _check_dynamic(self, raw: Any, path: str):
        if isinstance(raw, Mapping):
            for key, val in raw.items():
                if not isinstance(key, str):
                    self.fail(TypeMismatch(path, "string keys", describe_shape(key)))
                    continue
                self._check_dynamic(val, join_path(path, key))
        elif isinstance(raw, (list, tuple)):
            for idx, element in enumerate(raw):
                self._check_dynamic(element, index_path(path, idx))
        elif raw is not None and not isinstance(raw, (str, int, float, bool)):
            self.fail(
                TypeMismatch(path, AttributeKind.DYNAMIC.value, describe_shape(raw))
            )


def _plain(raw: Any) -> Any:
    """Convert mapping and tuple shapes to plain dicts and lists"""
    if isinstance(raw, Mapping):
        return {key: _plain(val) for key, val in raw.items()}
    if isinstance(raw, (list, tuple)):
        return [_plain(element) for element in raw]
    return raw
