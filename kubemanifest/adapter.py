"""
Adapters connect a kind schema to the lifecycle of the surrounding declarative
tool. A ResourceAdapter produces a stamped ResourceState on create and update;
a ManifestAdapter only renders the manifest.
"""

# Standard
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Tuple
import time

# First Party
import alog

# Local
from . import constants
from .binder import bind
from .bound_model import BoundObject
from .exceptions import ConfigurationError
from .schema import KindSchema
from .serializer import render
from .stamper import stamp

log = alog.use_channel("ADPTR")


## Data models #################################################################


@dataclass(frozen=True)
class ResourceState:
    """ResourceState is what the surrounding tool stores for one instance"""

    # Synthetic identifier, changed on every create/update
    id: int  # pylint: disable=invalid-name
    api_version: str
    kind: str
    yaml: str


## Base ########################################################################


class _AdapterBase:
    """Shared bind -> inject -> render pipeline"""

    def __init__(self, schema: KindSchema):
        self._schema = schema

    @property
    def schema(self) -> KindSchema:
        return self._schema

    @property
    def type_name(self) -> str:
        return self._schema.type_name

    def _log_resource(self, raw_config: Optional[Mapping[str, Any]]) -> dict:
        """Build the resource stub attached to log records"""
        metadata = None
        if isinstance(raw_config, Mapping):
            metadata = raw_config.get(constants.METADATA_ATTRIBUTE)
        if not isinstance(metadata, Mapping):
            metadata = {}
        return {
            constants.API_VERSION_KEY: self._schema.api_version,
            constants.KIND_KEY: self._schema.kind,
            constants.METADATA_KEY: {"name": metadata.get("name")},
        }

    def _bind_and_render(
        self, raw_config: Optional[Mapping[str, Any]]
    ) -> Tuple[BoundObject, str]:
        """Bind the config, inject the constant apiVersion and kind, and render

        Raises:
            ConfigurationError: Holding every binding failure
            InternalInconsistency: If rendering finds a malformed bound model
        """
        bound, failures = bind(self._schema, raw_config)
        if failures:
            log.debug(
                "Found %d configuration problem(s) for %s",
                len(failures),
                self.type_name,
                extra={"resource": self._log_resource(raw_config)},
            )
            raise ConfigurationError(failures, self.type_name)

        api_version = self._schema.api_version
        kind = self._schema.kind
        bound[constants.API_VERSION_ATTRIBUTE] = api_version
        bound[constants.KIND_ATTRIBUTE] = kind
        return bound, render(bound, api_version, kind)


## ResourceAdapter #############################################################


class ResourceAdapter(_AdapterBase):
    """Lifecycle hooks for a managed resource of one kind"""

    def __init__(self, schema: KindSchema, clock: Callable[[], int] = time.time_ns):
        """Construct for a kind

        Args:
            schema:  KindSchema
                The kind this adapter manages
            clock:  Callable[[], int]
                Nanosecond clock used for identifiers
        """
        super().__init__(schema)
        self._clock = clock

    def create(self, raw_config: Optional[Mapping[str, Any]]) -> ResourceState:
        """Render and stamp a new instance"""
        return self._apply("create", raw_config)

    def read(self, state: ResourceState) -> ResourceState:
        """All data is already held in the stored state"""
        log.debug("Read resource %s", self.type_name)
        return state

    def update(
        self,
        raw_config: Optional[Mapping[str, Any]],
        state: Optional[ResourceState] = None,
    ) -> ResourceState:
        """Re-render an instance and assign it a fresh identifier"""
        if state is not None:
            log.debug2("Replacing state with id %d", state.id)
        return self._apply("update", raw_config)

    def delete(
        self, state: Optional[ResourceState] = None
    ):  # pylint: disable=unused-argument
        """The surrounding tool drops the stored state itself"""
        log.debug("Delete resource %s", self.type_name)

    def _apply(
        self, operation: str, raw_config: Optional[Mapping[str, Any]]
    ) -> ResourceState:
        log.debug(
            "%s resource %s",
            operation.capitalize(),
            self.type_name,
            extra={"resource": self._log_resource(raw_config), "operation": operation},
        )
        bound, manifest = self._bind_and_render(raw_config)
        identifier = stamp(self._clock)
        bound[constants.ID_ATTRIBUTE] = identifier
        bound[constants.YAML_ATTRIBUTE] = manifest
        return ResourceState(
            id=identifier,
            api_version=bound[constants.API_VERSION_ATTRIBUTE],
            kind=bound[constants.KIND_ATTRIBUTE],
            yaml=manifest,
        )


## ManifestAdapter #############################################################


class ManifestAdapter(_AdapterBase):
    """Renders a manifest without tracking any state"""

    def read(self, raw_config: Optional[Mapping[str, Any]]) -> str:
        """Get the YAML manifest for the given config"""
        log.debug(
            "Read manifest %s",
            self.type_name,
            extra={"resource": self._log_resource(raw_config), "operation": "read"},
        )
        _, manifest = self._bind_and_render(raw_config)
        return manifest
