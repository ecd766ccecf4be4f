"""
CLI command for generating kind declarations from a CustomResourceDefinition
"""
# Standard
import argparse
import os

# Third Party
import yaml

# First Party
import alog

# Local
from ..crd import load_crd_file
from .base import CmdBase

log = alog.use_channel("CMD-CRD")


class ImportCrdCmd(CmdBase):
    __doc__ = __doc__

    def add_subparser(
        self,
        subparsers: argparse._SubParsersAction,
    ) -> argparse.ArgumentParser:
        """Add the subparser for this command"""
        parser = subparsers.add_parser(
            "import-crd",
            help="Write kind declarations for every served version of a CRD",
        )
        command_args = parser.add_argument_group("Command Arguments")
        command_args.add_argument(
            "--crd",
            required=True,
            help="YAML file holding one or more CustomResourceDefinitions",
        )
        command_args.add_argument(
            "--output",
            "-o",
            required=True,
            help="Directory in which to write the kind declaration files",
        )
        command_args.add_argument(
            "--force",
            "-f",
            action="store_true",
            default=False,
            help="Overwrite existing declaration files",
        )
        return parser

    def cmd(self, args: argparse.Namespace) -> int:
        kinds = load_crd_file(args.crd)
        os.makedirs(args.output, exist_ok=True)
        exit_code = 0
        for kind in kinds:
            out_path = os.path.join(args.output, f"{kind.type_name}.yaml")
            if os.path.exists(out_path) and not args.force:
                log.error("Not overwriting %s without --force", out_path)
                exit_code = 1
                continue
            with open(out_path, "w", encoding="utf-8") as handle:
                yaml.safe_dump(kind.to_dict(), handle, sort_keys=False)
            log.info("Wrote %s", out_path)
            print(out_path)
        return exit_code
