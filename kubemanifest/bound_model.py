"""
The bound model is the typed, validated result of binding raw configuration
against a schema. Every attribute slot holds either a concrete value or the
ABSENT marker, so "not supplied" is never confused with an empty value.
"""

# Standard
from typing import Any, Dict, Iterator, Tuple

# Local
from .exceptions import assert_consistent
from .int_or_string import IntOrString
from .schema import AttributeSchema


class _Absent:
    """Marker type for an attribute that was not supplied"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "ABSENT"

    def __bool__(self):
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, _):
        return self

    def __reduce__(self):
        return (_Absent, ())


ABSENT = _Absent()


class BoundObject:
    """The bound values of a single object node, keyed by attribute name and
    ordered as the schema declares them
    """

    def __init__(self, schema: AttributeSchema, values: Dict[str, Any] = None):
        """Construct with every declared attribute ABSENT

        Args:
            schema:  AttributeSchema
                The object or list_of_objects node these values belong to
            values:  Dict[str, Any]
                Initial values to set
        """
        assert_consistent(schema.is_nested, f"[{schema.name}] is not an object node")
        self._schema = schema
        self._values = {child.name: ABSENT for child in schema.children}
        for name, value in (values or {}).items():
            self[name] = value

    @property
    def schema(self) -> AttributeSchema:
        return self._schema

    def __getitem__(self, name: str) -> Any:
        if name not in self._values:
            raise KeyError(f"No attribute [{name}] in [{self._schema.name}]")
        return self._values[name]

    def __setitem__(self, name: str, value: Any):
        assert_consistent(
            name in self._values,
            f"Cannot set undeclared attribute [{name}] on [{self._schema.name}]",
        )
        self._values[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def get(self, name: str, default: Any = None) -> Any:
        value = self._values.get(name, ABSENT)
        return default if value is ABSENT else value

    def is_present(self, name: str) -> bool:
        return self[name] is not ABSENT

    def items(self) -> Iterator[Tuple[str, Any]]:
        return iter(self._values.items())

    def to_python(self) -> Dict[str, Any]:
        """Get the present values as plain python data keyed by attribute name"""
        return {
            name: _to_python(value)
            for name, value in self._values.items()
            if value is not ABSENT
        }

    def __eq__(self, other):
        if not isinstance(other, BoundObject):
            return NotImplemented
        return self._schema is other._schema and self._values == other._values

    def __repr__(self):
        return f"BoundObject({self._schema.name}, {self.to_python()})"


def _to_python(value: Any) -> Any:
    if isinstance(value, BoundObject):
        return value.to_python()
    if isinstance(value, IntOrString):
        return value.to_wire()
    if isinstance(value, list):
        return [_to_python(element) for element in value]
    return value
