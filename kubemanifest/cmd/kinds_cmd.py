"""
CLI command for listing the registered kinds
"""
# Standard
import argparse

# First Party
import alog

# Local
from ..registry import KindRegistry
from .base import CmdBase

log = alog.use_channel("CMD-KINDS")


class KindsCmd(CmdBase):
    __doc__ = __doc__

    def add_subparser(
        self,
        subparsers: argparse._SubParsersAction,
    ) -> argparse.ArgumentParser:
        """Add the subparser for this command"""
        parser = subparsers.add_parser(
            "kinds",
            help="List the resource type names of all registered kinds",
        )
        command_args = parser.add_argument_group("Command Arguments")
        command_args.add_argument(
            "--verbose",
            "-v",
            action="store_true",
            default=False,
            help="Also print the apiVersion and kind of each type",
        )
        return parser

    def cmd(self, args: argparse.Namespace) -> int:
        registry = KindRegistry.from_config()
        for type_name in registry.type_names:
            if args.verbose:
                schema = registry.get(type_name)
                print(f"{type_name}\t{schema.api_version}\t{schema.kind}")
            else:
                print(type_name)
        return 0
