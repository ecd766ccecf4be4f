"""
Shared module to hold constant values for the library
"""

# Delimiter used for nested attribute paths
NESTED_DICT_DELIM = "."

# Prefix of every generated resource type name
TYPE_NAME_PREFIX = "k8s"

# Names of the computed attributes at the root of every resource kind
ID_ATTRIBUTE = "id"
YAML_ATTRIBUTE = "yaml"
API_VERSION_ATTRIBUTE = "api_version"
KIND_ATTRIBUTE = "kind"
METADATA_ATTRIBUTE = "metadata"

# Wire names of the fixed top-level manifest keys
API_VERSION_KEY = "apiVersion"
KIND_KEY = "kind"
METADATA_KEY = "metadata"

# Limits for kubernetes object metadata
# https://kubernetes.io/docs/concepts/overview/working-with-objects/names/
MAX_NAME_LENGTH = 253
MAX_LABEL_NAME_LENGTH = 63
MAX_LABEL_VALUE_LENGTH = 63
MAX_ANNOTATIONS_SIZE = 256 * 1024

# File suffixes recognized as kind declarations
KIND_FILE_SUFFIXES = (".yaml", ".yml")
