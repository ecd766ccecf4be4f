"""
Synthetic identifiers for resource instances. The identifier is the wall-clock
time in nanoseconds at the moment of stamping and only signals "content
changed" to the surrounding tool. It is not guaranteed to be unique when two
stamps land on the same clock tick.
"""

# Standard
from typing import Callable
import time

# First Party
import alog

# Local
from .exceptions import assert_consistent

log = alog.use_channel("STAMP")

# Largest value representable by the 64-bit identifier
MAX_IDENTIFIER = 2**63 - 1


def stamp(clock: Callable[[], int] = time.time_ns) -> int:
    """Get a new identifier from the given nanosecond clock"""
    identifier = int(clock())
    assert_consistent(
        0 <= identifier <= MAX_IDENTIFIER,
        f"Clock value {identifier} does not fit in a 64-bit identifier",
    )
    log.debug2("Stamped identifier %d", identifier)
    return identifier
