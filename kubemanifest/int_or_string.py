"""
The IntOrString type holds a value that kubernetes accepts as either an integer
or a string (ports, resource quantities, percentages, ...). The representation
that was supplied is kept so that serialization reproduces it exactly.
"""

# Standard
from typing import Union
import re

# Local
from .exceptions import TypeMismatch
from .utils import describe_shape

# Text accepted as the integer form of a string value
_INTEGER_EXPR = re.compile(r"[+-]?[0-9]+")


class IntOrString:
    """Tagged value holding either an int or a str"""

    __slots__ = ["_value"]

    def __init__(self, value: Union[int, str]):
        """Construct directly from an int or str. Use from_value to coerce
        arbitrary configuration values with error reporting.
        """
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise TypeMismatch("", "int_or_string", describe_shape(value))
        self._value = value

    @classmethod
    def from_value(cls, value, path: str = "") -> "IntOrString":
        """Coerce a raw configuration value

        Args:
            value:  Any
                An int, a str, or an existing IntOrString
            path:  str
                The attribute path to report on failure

        Returns:
            int_or_string:  IntOrString
                The tagged value. Only values that arrive as ints are int-tagged,
                so "8080" and "100Mi" both stay strings.
        """
        if isinstance(value, IntOrString):
            return value
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise TypeMismatch(path, "int_or_string", describe_shape(value))
        return cls(value)

    ## Accessors ###############################################################

    @property
    def is_int(self) -> bool:
        return isinstance(self._value, int)

    @property
    def is_str(self) -> bool:
        return isinstance(self._value, str)

    @property
    def canonical_str(self) -> str:
        """The canonical text form used for comparison"""
        return str(self._value)

    def as_int(self) -> int:
        """Get the integer form of the value

        Raises:
            ValueError: If the stored text is not a plain integer (e.g. "100Mi")
        """
        if self.is_int:
            return self._value
        if not _INTEGER_EXPR.fullmatch(self._value):
            raise ValueError(f"{self._value!r} is not an integer")
        return int(self._value, 10)

    def to_wire(self) -> Union[int, str]:
        """Get the value in the representation it was supplied in"""
        return self._value

    ## Dunders #################################################################

    def __eq__(self, other):
        if isinstance(other, IntOrString):
            return self.canonical_str == other.canonical_str
        return NotImplemented

    def __hash__(self):
        return hash(self.canonical_str)

    def __str__(self):
        return self.canonical_str

    def __repr__(self):
        return f"IntOrString({self._value!r})"
