"""
Custom logging formats that identify the manifest being rendered
"""

# First Party
from alog import AlogJsonFormatter


class KubeManifestJsonFormatter(AlogJsonFormatter):
    """Json log format which adds the kind, apiVersion and name of the resource
    attached to a record (as extra={"resource": ...}) and the lifecycle
    operation in progress
    """

    _FIELDS_TO_PRINT = AlogJsonFormatter._FIELDS_TO_PRINT + [
        "kind",
        "apiVersion",
        "resourceName",
        "operation",
    ]

    def __init__(self, operation=None):
        super().__init__()
        self.operation = operation

    def format(self, record):
        if self.operation and not getattr(record, "operation", None):
            record.operation = self.operation

        resource = getattr(record, "resource", None)
        if isinstance(resource, dict):
            record.kind = resource.get("kind")
            record.apiVersion = resource.get("apiVersion")
            record.resourceName = (resource.get("metadata") or {}).get("name")

        return super().format(record)
