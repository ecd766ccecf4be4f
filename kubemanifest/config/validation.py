"""
Module to validate values in a loaded config. The validation config is an
attribute declaration of the whole library config, so the loaded values are
simply bound against it.
"""

# Standard
from typing import List

# First Party
import aconfig
import alog

# Local
from ..binder import bind  # pylint: disable=cyclic-import
from ..schema import AttributeSchema

log = alog.use_channel("CONFG")


## Public ######################################################################


def get_invalid_params(
    config: aconfig.Config,
    validation_config: aconfig.Config,
) -> List[str]:
    """Get a list of any params that are invalid

    Args:
        config:  aconfig.Config
            The parsed config with any override values
        validation_config:  aconfig.Config
            The attribute declaration describing the config

    Returns:
        invalid_params:  List[str]
            A list of all string keys for parameters that fail validation
    """
    schema = AttributeSchema.from_dict(_to_plain(validation_config))

    # Extra keys in the library config are allowed so that applications can
    # carry their own settings alongside
    _, failures = bind(schema, config, allow_unknown_fields=True)
    invalid_params = []
    for failure in failures:
        log.warning("Found invalid config key %s", failure)
        if failure.path not in invalid_params:
            invalid_params.append(failure.path)

    # Return the list of invalid params
    return invalid_params


## Implementation ##############################################################


def _to_plain(value):
    """aconfig nests AttributeAccessDicts which the declaration parser does not
    need, so they are converted back to plain containers
    """
    if isinstance(value, dict):
        return {key: _to_plain(val) for key, val in value.items()}
    if isinstance(value, list):
        return [_to_plain(val) for val in value]
    return value
