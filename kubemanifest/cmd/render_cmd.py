"""
CLI command for rendering the manifest of a configured resource
"""
# Standard
import argparse
import sys

# Third Party
import yaml

# First Party
import alog

# Local
from ..exceptions import ConfigurationError, RegistryError
from ..registry import KindRegistry
from .base import CmdBase

log = alog.use_channel("CMD-RNDR")


class RenderCmd(CmdBase):
    __doc__ = __doc__

    def add_subparser(
        self,
        subparsers: argparse._SubParsersAction,
    ) -> argparse.ArgumentParser:
        """Add the subparser for this command"""
        parser = subparsers.add_parser(
            "render",
            help="Bind a resource config file and print its YAML manifest",
        )
        command_args = parser.add_argument_group("Command Arguments")
        command_args.add_argument(
            "--kind",
            "-k",
            required=True,
            help="Resource type name of the kind (see the kinds command)",
        )
        command_args.add_argument(
            "--config",
            "-c",
            required=True,
            help="YAML file holding the resource config keyed by attribute name",
        )
        command_args.add_argument(
            "--stamp",
            "-s",
            action="store_true",
            default=False,
            help="Run a create and print the assigned identifier to stderr",
        )
        return parser

    def cmd(self, args: argparse.Namespace) -> int:
        registry = KindRegistry.from_config()
        try:
            schema = registry.get(args.kind)
        except RegistryError as err:
            log.error("%s", err)
            return 2

        with open(args.config, encoding="utf-8") as handle:
            raw_config = yaml.safe_load(handle)
        log.debug("Rendering %s from %s", schema.type_name, args.config)

        try:
            if args.stamp:
                state = registry.resource_adapter(schema.type_name).create(raw_config)
                print(f"id: {state.id}", file=sys.stderr)
                manifest = state.yaml
            else:
                manifest = registry.manifest_adapter(schema.type_name).read(raw_config)
        except ConfigurationError as err:
            print(str(err), file=sys.stderr)
            return 1

        sys.stdout.write(manifest)
        return 0
