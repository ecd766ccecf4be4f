"""
The catalog of named validators that can be attached to attribute schema nodes.
Each validator is a callable mapping a bound value to a (possibly empty) list
of violation messages. Validators can be declared as data using their type key:

    {"type": "regex", "pattern": "^ot-[a-zA-Z0-9]+$"}
"""

# Standard
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union
import abc
import base64
import binascii
import re

# First Party
import alog

# Local
from . import constants
from .exceptions import assert_schema
from .int_or_string import IntOrString

log = alog.use_channel("VALID")

# https://github.com/kubernetes/apimachinery/blob/master/pkg/util/validation
_DNS1123_LABEL = r"[a-z0-9]([-a-z0-9]*[a-z0-9])?"
_DNS1123_SUBDOMAIN_EXPR = re.compile(rf"^{_DNS1123_LABEL}(\.{_DNS1123_LABEL})*$")
_QUALIFIED_NAME_EXPR = re.compile(r"^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
_LABEL_VALUE_EXPR = re.compile(r"^(([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?$")

# https://github.com/kubernetes/apimachinery/blob/master/pkg/api/resource/quantity.go
_QUANTITY_PATTERN = (
    r"^[+-]?(\d+(\.\d*)?|\.\d+)(Ki|Mi|Gi|Ti|Pi|Ei|m|k|M|G|T|P|E|[eE][+-]?\d+)?$"
)
_QUANTITY_EXPR = re.compile(_QUANTITY_PATTERN)

# https://datatracker.ietf.org/doc/html/rfc3339#section-5.6
_DATE_TIME_EXPR = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})(\.\d+)?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))"
)


## Shared checks ###############################################################


def _check_subdomain(value: str) -> List[str]:
    violations = []
    if len(value) > constants.MAX_NAME_LENGTH:
        violations.append(
            f"must be no more than {constants.MAX_NAME_LENGTH} characters"
        )
    if not _DNS1123_SUBDOMAIN_EXPR.match(value):
        violations.append(
            "a lowercase RFC 1123 subdomain must consist of lower case "
            "alphanumeric characters, '-' or '.', and must start and end with "
            "an alphanumeric character"
        )
    return violations


def _check_qualified_name(key: str) -> List[str]:
    """Check a label or annotation key of the form [prefix/]name"""
    prefix, sep, name = key.rpartition("/")
    violations = []
    if sep:
        if not prefix:
            violations.append(f"{key!r}: prefix part must be non-empty")
        else:
            violations.extend(
                f"{key!r}: prefix part {msg}" for msg in _check_subdomain(prefix)
            )
    if not name:
        violations.append(f"{key!r}: name part must be non-empty")
        return violations
    if len(name) > constants.MAX_LABEL_NAME_LENGTH:
        violations.append(
            f"{key!r}: name part must be no more than "
            f"{constants.MAX_LABEL_NAME_LENGTH} characters"
        )
    if not _QUALIFIED_NAME_EXPR.match(name):
        violations.append(
            f"{key!r}: name part must consist of alphanumeric characters, '-', "
            "'_' or '.', and must start and end with an alphanumeric character"
        )
    return violations


## Base Class ##################################################################


class Validator(abc.ABC):
    """Base class for all validators in the catalog"""

    TYPE_KEY = None

    # Whether the validator applies to each element of a list or each value of
    # a map
    ELEMENTWISE = True

    def __init__(self, **kwargs):
        """Hang onto the declared arguments so the validator can be written
        back out as data
        """
        self._args = kwargs

    @property
    def name(self) -> str:
        return self.TYPE_KEY

    def __call__(self, value: Any) -> List[str]:
        """Run the validator against a bound value

        Args:
            value:  Any
                The bound value. IntOrString values are checked in the form
                they were supplied in.

        Returns:
            violations:  List[str]
                Human readable messages for every problem found
        """
        if isinstance(value, IntOrString):
            value = value.to_wire()
        if self.ELEMENTWISE and isinstance(value, list):
            violations = []
            for idx, element in enumerate(value):
                violations.extend(f"[{idx}] {msg}" for msg in self(element))
            return violations
        if self.ELEMENTWISE and isinstance(value, dict):
            violations = []
            for key in sorted(value):
                violations.extend(f"[{key}] {msg}" for msg in self(value[key]))
            return violations
        violations = self._check(value)
        if violations:
            log.debug3("Validator [%s] rejected %r: %s", self.name, value, violations)
        return violations

    def to_dict(self) -> Dict[str, Any]:
        """Get the data declaration for this validator"""
        return {"type": self.TYPE_KEY, **self._args}

    def __repr__(self):
        args = ", ".join(f"{key}={val!r}" for key, val in self._args.items())
        return f"{type(self).__name__}({args})"

    def __eq__(self, other):
        return type(self) is type(other) and self._args == other._args

    def __hash__(self):
        return hash((self.TYPE_KEY, repr(self)))

    @abc.abstractmethod
    def _check(self, value: Any) -> List[str]:
        """All child classes must implement the check for a single value"""


## Validators ##################################################################

# pylint: disable=too-few-public-methods


class NameValidator(Validator):
    """Object names must be RFC 1123 subdomains"""

    TYPE_KEY = "name"

    def _check(self, value: Any) -> List[str]:
        if not isinstance(value, str):
            return ["must be a string"]
        return _check_subdomain(value)


class LabelsValidator(Validator):
    """Label keys must be qualified names and values short label values"""

    TYPE_KEY = "labels"
    ELEMENTWISE = False

    def _check(self, value: Any) -> List[str]:
        if not isinstance(value, dict):
            return ["must be a map"]
        violations = []
        for key, val in value.items():
            violations.extend(_check_qualified_name(key))
            if len(val) > constants.MAX_LABEL_VALUE_LENGTH:
                violations.append(
                    f"{key!r}: value must be no more than "
                    f"{constants.MAX_LABEL_VALUE_LENGTH} characters"
                )
            if not _LABEL_VALUE_EXPR.match(val):
                violations.append(
                    f"{key!r}: value must be empty or consist of alphanumeric "
                    "characters, '-', '_' or '.', and must start and end with an "
                    "alphanumeric character"
                )
        return violations


class AnnotationsValidator(Validator):
    """Annotation keys must be qualified names and the total size is bounded"""

    TYPE_KEY = "annotations"
    ELEMENTWISE = False

    def _check(self, value: Any) -> List[str]:
        if not isinstance(value, dict):
            return ["must be a map"]
        violations = []
        total_size = 0
        for key, val in value.items():
            violations.extend(_check_qualified_name(key))
            total_size += len(key) + len(val)
        if total_size > constants.MAX_ANNOTATIONS_SIZE:
            violations.append(
                f"total size of annotations must be no more than "
                f"{constants.MAX_ANNOTATIONS_SIZE} bytes"
            )
        return violations


class Base64Validator(Validator):
    """Values must be standard base64 encoded"""

    TYPE_KEY = "base64"

    def _check(self, value: Any) -> List[str]:
        if not isinstance(value, str):
            return ["must be a string"]
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as err:
            return [f"must be base64 encoded: {err}"]
        return []


class RegexValidator(Validator):
    """Values must contain a match for the given regular expression"""

    TYPE_KEY = "regex"

    def __init__(self, *, pattern: str, message: Optional[str] = None):
        super().__init__(pattern=pattern, **({"message": message} if message else {}))
        try:
            self._expr = re.compile(pattern)
        except re.error as err:
            assert_schema(False, f"Invalid regex pattern {pattern!r}: {err}")
        self._message = message or f"must match pattern {pattern!r}"

    def _check(self, value: Any) -> List[str]:
        if self._expr.search(str(value)) is None:
            return [self._message]
        return []


class QuantityValidator(Validator):
    """Values must be kubernetes resource quantities (e.g. 100Mi, 0.5, 1e3)"""

    TYPE_KEY = "quantity"

    def _check(self, value: Any) -> List[str]:
        if isinstance(value, int) and not isinstance(value, bool):
            return []
        if not isinstance(value, str) or not _QUANTITY_EXPR.fullmatch(value):
            return [f"must be a quantity matching {_QUANTITY_PATTERN!r}"]
        return []


class DateTimeValidator(Validator):
    """Values must be RFC 3339 timestamps (e.g. 2024-05-01T12:00:00Z)"""

    TYPE_KEY = "date_time"

    def _check(self, value: Any) -> List[str]:
        if not isinstance(value, str):
            return ["must be a string"]
        match = _DATE_TIME_EXPR.fullmatch(value)
        if match is None:
            return ["must be an RFC 3339 date-time (e.g. 2024-05-01T12:00:00Z)"]
        year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
        utc, sign, offset_hours, offset_minutes = match.groups()[7:]
        if second > 60:
            return ["must be a valid RFC 3339 date-time: second must be in 0..60"]
        if not utc and (int(offset_hours) > 23 or int(offset_minutes) > 59):
            return [
                "must be a valid RFC 3339 date-time: bad offset "
                f"{sign}{offset_hours}:{offset_minutes}"
            ]
        tzinfo = timezone.utc
        if not utc:
            offset = timedelta(hours=int(offset_hours), minutes=int(offset_minutes))
            tzinfo = timezone(-offset if sign == "-" else offset)
        try:
            # Leap seconds are allowed in the text but not by datetime
            datetime(year, month, day, hour, minute, min(second, 59), tzinfo=tzinfo)
        except ValueError as err:
            return [f"must be a valid RFC 3339 date-time: {err}"]
        return []


class OneOfValidator(Validator):
    """Values must be one of a fixed set"""

    TYPE_KEY = "one_of"

    def __init__(
        self,
        *,
        values: List[Union[str, int]],
        case_insensitive: bool = False,
    ):
        assert_schema(
            isinstance(values, list) and bool(values),
            "Must specify at least one one_of value!",
        )
        kwargs = {"values": values}
        if case_insensitive:
            kwargs["case_insensitive"] = True
        super().__init__(**kwargs)
        self._values = values
        self._case_insensitive = case_insensitive

    def _check(self, value: Any) -> List[str]:
        if self._case_insensitive and isinstance(value, str):
            valid = value.lower() in {
                str(val).lower() for val in self._values if isinstance(val, str)
            }
        else:
            valid = value in self._values
        if not valid:
            return [f"must be one of {self._values}"]
        return []


class LengthValidator(Validator):
    """Strings, lists and maps must have a length within the given bounds"""

    TYPE_KEY = "length"
    ELEMENTWISE = False

    def __init__(self, *, min_len: Optional[int] = None, max_len: Optional[int] = None):
        assert_schema(
            min_len is not None or max_len is not None,
            "Must specify min_len and/or max_len",
        )
        kwargs = {}
        if min_len is not None:
            kwargs["min_len"] = min_len
        if max_len is not None:
            kwargs["max_len"] = max_len
        super().__init__(**kwargs)
        self._min_len = min_len
        self._max_len = max_len

    def _check(self, value: Any) -> List[str]:
        if not isinstance(value, (str, list, dict)):
            return ["must have a length"]
        violations = []
        if self._min_len is not None and len(value) < self._min_len:
            violations.append(f"length must be at least {self._min_len}")
        if self._max_len is not None and len(value) > self._max_len:
            violations.append(f"length must be at most {self._max_len}")
        return violations


class RangeValidator(Validator):
    """Numbers must fall within the given inclusive bounds"""

    TYPE_KEY = "range"

    def __init__(
        self,
        *,
        min: Optional[Union[int, float]] = None,  # pylint: disable=redefined-builtin
        max: Optional[Union[int, float]] = None,  # pylint: disable=redefined-builtin
    ):
        """Construct with optional bounds

        NOTE: The builtin min/max names are used here so that the arguments have
            the intuitive names in kind declaration files
        """
        assert_schema(min is not None or max is not None, "Must specify min and/or max")
        kwargs = {}
        if min is not None:
            kwargs["min"] = min
        if max is not None:
            kwargs["max"] = max
        super().__init__(**kwargs)
        self._min = min
        self._max = max

    def _check(self, value: Any) -> List[str]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return ["must be a number"]
        violations = []
        if self._min is not None and value < self._min:
            violations.append(f"must be at least {self._min}")
        if self._max is not None and value > self._max:
            violations.append(f"must be at most {self._max}")
        return violations


# Re-enable the pylint warning
# pylint: enable=too-few-public-methods

## Factory #####################################################################


def _create_factory_map(validator_class, factory_map=None):
    """Helper to recursively create the singleton factory map"""
    factory_map = factory_map or {}

    # Add this class if it's not abstract
    if not validator_class.__abstractmethods__:
        factory_map[validator_class.TYPE_KEY] = validator_class

    # Recurse
    for subclass in validator_class.__subclasses__():
        factory_map = _create_factory_map(subclass, factory_map)

    return factory_map


# Global map from type keys to validator classes
_factory_map = _create_factory_map(Validator)


def construct_validator(validator_args: Dict[str, Any]) -> Validator:
    """Construct a Validator from its data declaration

    Args:
        validator_args:  Dict[str, Any]
            The key/value pairs for this validator, including its "type"

    Returns:
        validator:  Validator
            The constructed validator

    Raises:
        SchemaError: If the type is missing or unknown, or the arguments are
            not valid for the type
    """
    assert_schema(isinstance(validator_args, dict), "Validators must be maps")
    validator_args = dict(validator_args)
    validator_type = validator_args.pop("type", None)
    assert_schema(
        isinstance(validator_type, str) and validator_type in _factory_map,
        f"Unknown validator type: {validator_type}",
    )
    try:
        return _factory_map[validator_type](**validator_args)
    except TypeError as err:
        assert_schema(False, f"Invalid arguments for validator {validator_type}: {err}")
