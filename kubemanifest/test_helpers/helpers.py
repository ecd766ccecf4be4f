"""
This module holds common helper functions for making testing easy
"""

# Standard
from contextlib import contextmanager
import os

# First Party
import aconfig
import alog

# Local
from kubemanifest.config import library_config as config_detail_dict
from kubemanifest.schema import AttributeKind, AttributeSchema, Cardinality, KindSchema
from kubemanifest.validators import (
    LengthValidator,
    OneOfValidator,
    QuantityValidator,
    RangeValidator,
    RegexValidator,
)

log = alog.use_channel("TEST")


def configure_logging():
    alog.configure(
        os.environ.get("LOG_LEVEL", "off"),
        os.environ.get("LOG_FILTERS", ""),
        formatter="json"
        if os.environ.get("LOG_JSON", "").lower() == "true"
        else "pretty",
        thread_id=os.environ.get("LOG_THREAD_ID", "").lower() == "true",
    )


configure_logging()

TEST_DATA_DIR = os.path.join(os.path.dirname(__file__), "data")
TEST_KINDS_DIR = os.path.join(TEST_DATA_DIR, "kinds")

TEST_INSTANCE_NAME = "cache-one"
TEST_NAMESPACE = "test"

## Sample kinds ################################################################


def tag_attribute(cardinality=Cardinality.OPTIONAL):
    return AttributeSchema(
        "tags",
        AttributeKind.LIST_OF_OBJECTS,
        cardinality=cardinality,
        children=[
            AttributeSchema(
                "key",
                AttributeKind.STRING,
                cardinality=Cardinality.REQUIRED,
                validators=[LengthValidator(min_len=1, max_len=128)],
            ),
            AttributeSchema("value", AttributeKind.STRING),
        ],
    )


def sample_kind(namespaced=True, body_field="spec"):
    """Build a kind exercising every attribute kind. Only spec.engine is
    required in the body.
    """
    return KindSchema(
        group="cache.example.com",
        version="v1",
        kind="CacheGroup",
        namespaced=namespaced,
        body=[
            AttributeSchema(
                body_field,
                AttributeKind.OBJECT,
                cardinality=Cardinality.REQUIRED,
                children=[
                    AttributeSchema(
                        "engine",
                        AttributeKind.STRING,
                        cardinality=Cardinality.REQUIRED,
                        validators=[OneOfValidator(values=["Redis", "Memcached"])],
                    ),
                    AttributeSchema(
                        "subscription_id",
                        AttributeKind.STRING,
                        wire_name="subscriptionID",
                        validators=[RegexValidator(pattern="^[0-9a-f-]+$")],
                    ),
                    AttributeSchema(
                        "node_count",
                        AttributeKind.INT,
                        validators=[RangeValidator(min=1, max=10)],
                    ),
                    AttributeSchema(
                        "memory",
                        AttributeKind.INT_OR_STRING,
                        validators=[QuantityValidator()],
                    ),
                    AttributeSchema("eviction_ratio", AttributeKind.FLOAT),
                    AttributeSchema("zones", AttributeKind.LIST),
                    AttributeSchema("parameters", AttributeKind.MAP),
                    tag_attribute(),
                    AttributeSchema(
                        "auth",
                        AttributeKind.OBJECT,
                        children=[
                            AttributeSchema("enabled", AttributeKind.BOOL),
                            AttributeSchema(
                                "secret_name",
                                AttributeKind.STRING,
                                cardinality=Cardinality.REQUIRED,
                            ),
                        ],
                    ),
                    AttributeSchema("extra", AttributeKind.DYNAMIC),
                ],
            )
        ],
    )


def minimal_config(name=TEST_INSTANCE_NAME, **spec):
    """Build the smallest valid raw config for the sample kind"""
    spec.setdefault("engine", "Redis")
    return {"metadata": {"name": name}, "spec": spec}


class FakeClock:
    """Nanosecond clock that advances by a fixed step on every read"""

    def __init__(self, start=1_700_000_000_000_000_000, step=1):
        self.now = start
        self.step = step

    def __call__(self):
        current = self.now
        self.now += self.step
        return current


## Library config ##############################################################


def _leaves(config_obj, path=None):
    path = path or []
    for key, val in config_obj.items():
        if isinstance(val, dict):
            yield from _leaves(val, path + [key])
        else:
            yield path + [key], val


def _set_leaf(config_obj, path, val):
    for key in path[:-1]:
        config_obj = config_obj[key]
    config_obj[path[-1]] = val


@contextmanager
def library_config(**config_overrides):
    """This context manager sets library config values temporarily and reverts
    them on completion. Nested sections are overridden key by key, e.g.

        with library_config(binding={"allow_unknown_fields": True}):
            ...
    """
    old_leaves = list(_leaves(config_detail_dict))
    old_sections = dict(config_detail_dict.items())
    old_keys = set(config_detail_dict.keys())
    for key, val in config_overrides.items():
        current = config_detail_dict.get(key)
        if isinstance(val, dict) and isinstance(current, dict):
            for sub_path, sub_val in _leaves(val):
                _set_leaf(current, sub_path, sub_val)
        elif isinstance(val, dict):
            config_detail_dict[key] = aconfig.AttributeAccessDict(val)
        else:
            config_detail_dict[key] = val

    try:
        yield
    finally:
        for key in set(config_detail_dict.keys()) - old_keys:
            del config_detail_dict[key]
        config_detail_dict.update(old_sections)
        for path, val in old_leaves:
            _set_leaf(config_detail_dict, path, val)
