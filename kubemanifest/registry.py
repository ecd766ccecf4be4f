"""
The KindRegistry holds every kind schema known to a process. It is built once at
startup (usually from kind declaration files) and then handed to whatever
dispatches lifecycle operations. It is read-only after construction and is safe
to share.
"""

# Standard
from typing import Callable, Iterable, Iterator, List, Optional
import os
import time

# Third Party
import yaml

# First Party
import aconfig
import alog

# Local
from . import config, constants
from .adapter import ManifestAdapter, ResourceAdapter
from .exceptions import RegistryError, SchemaError
from .schema import KindSchema

log = alog.use_channel("REGY")

# Directory holding the kind declarations shipped with the library
BUILTIN_KINDS_DIR = os.path.join(os.path.dirname(__file__), "kinds")


class KindRegistry:
    """Registry of kind schemas keyed by resource type name"""

    def __init__(self, kinds: Optional[Iterable[KindSchema]] = None):
        self._kinds = {}
        for kind in kinds or []:
            self.register(kind)

    ## Registration ############################################################

    def register(self, schema: KindSchema):
        """Register a new kind

        Args:
            schema:  KindSchema
                The kind to register

        Raises:
            RegistryError: If a kind with the same type name is registered
        """
        if not isinstance(schema, KindSchema):
            raise RegistryError(f"Cannot register {schema!r}")
        if schema.type_name in self._kinds:
            raise RegistryError(f"Got duplicate registration for {schema.type_name}")
        log.debug2("Registering %s", schema.type_name)
        self._kinds[schema.type_name] = schema

    def load_file(self, path: str) -> List[KindSchema]:
        """Load and register every kind declared in a YAML file. A file may
        hold several declarations as separate documents.

        Raises:
            SchemaError: If the file holds a malformed declaration
        """
        log.debug("Loading kind declarations from %s", path)
        with open(path, encoding="utf-8") as handle:
            try:
                declarations = [doc for doc in yaml.safe_load_all(handle) if doc]
            except yaml.YAMLError as err:
                raise SchemaError(f"Invalid YAML in {path}: {err}") from err

        kinds = []
        for declaration in declarations:
            kind = KindSchema.from_dict(declaration)
            self.register(kind)
            kinds.append(kind)
        return kinds

    def load_directory(self, path: str) -> List[KindSchema]:
        """Load every kind declaration file in a directory (sorted by name so
        that load order is stable)
        """
        if not os.path.isdir(path):
            raise RegistryError(f"Kind directory {path} does not exist")
        kinds = []
        for fname in sorted(os.listdir(path)):
            if fname.endswith(constants.KIND_FILE_SUFFIXES):
                kinds.extend(self.load_file(os.path.join(path, fname)))
        log.debug("Loaded %d kind(s) from %s", len(kinds), path)
        return kinds

    @classmethod
    def from_config(cls, config_obj: Optional[aconfig.Config] = None) -> "KindRegistry":
        """Build a registry from the registry section of the library config

        Args:
            config_obj:  Optional[aconfig.Config]
                Config with load_builtin_kinds and kind_dirs keys. Defaults to
                the registry section of the library config.

        Returns:
            registry:  KindRegistry
                The registry holding every configured kind
        """
        config_obj = config_obj or config.registry
        registry = cls()
        if config_obj.load_builtin_kinds:
            registry.load_directory(BUILTIN_KINDS_DIR)
        for kind_dir in config_obj.kind_dirs or []:
            registry.load_directory(kind_dir)
        log.debug("Registered %d kind(s)", len(registry))
        return registry

    ## Lookup ##################################################################

    def get(self, type_name: str) -> KindSchema:
        """Get a kind by its resource type name

        Raises:
            RegistryError: If the kind is not registered
        """
        if type_name not in self._kinds:
            raise RegistryError(f"Unknown resource type {type_name}")
        return self._kinds[type_name]

    @property
    def type_names(self) -> List[str]:
        return sorted(self._kinds)

    def resource_adapter(
        self,
        type_name: str,
        clock: Callable[[], int] = time.time_ns,
    ) -> ResourceAdapter:
        """Get the lifecycle adapter for a registered kind"""
        return ResourceAdapter(self.get(type_name), clock=clock)

    def manifest_adapter(self, type_name: str) -> ManifestAdapter:
        """Get the manifest-only adapter for a registered kind"""
        return ManifestAdapter(self.get(type_name))

    ## Dunders #################################################################

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._kinds

    def __iter__(self) -> Iterator[KindSchema]:
        return iter(self._kinds.values())

    def __len__(self) -> int:
        return len(self._kinds)
