#
# Copyright 2024 sodbuild Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

import os
import sys
import importlib
import argparse

from sodbuild.build_scripts.build_errors import SodBuildError
from sodbuild.utils.context.namespace import CliNameSpace
from sodbuild.utils.context.context import CliContext
from sodbuild.utils.context.command import CliCommand

SCRIPT_PATH = os.path.split(os.path.realpath(__file__))[0]


# Root Class for Command Line Interface
class Cli(CliCommand):
    def description(self) -> str:
        return """SODBUILD - libsodium builder for Apple platforms

Builds universal libsodium static libraries for iOS, macOS, tvOS and watchOS
using libsodium's own configure/make and the installed Xcode SDKs.

USAGE:
    sodbuild <command> [options]

COMMANDS:
    build       Download libsodium and build it for every installed SDK
    check       Show installed SDKs and the resolved build matrix
    clean       Remove build, dist and source directories

EXAMPLES:
    sodbuild build                         # Build all installed platforms
    sodbuild build --platforms iOS,tvOS    # Build only iOS and tvOS
    sodbuild check                         # Preview toolchain flags
    sodbuild clean --dry-run               # Preview what will be removed

For more information on a specific command:
    sodbuild <command> --help
        """

    def get_command_list(self) -> list:
        arr = []
        for command in os.listdir(os.path.join(SCRIPT_PATH, "commands")):
            if (
                not command.startswith("_")
                and not command.startswith("test_")
                and command.endswith(".py")
            ):
                arr.append(os.path.splitext(os.path.basename(command))[0])
        return sorted(arr)

    def parser(self, add_help=True) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="sodbuild",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
            add_help=add_help,
        )
        parser.add_argument(
            "subcommand",
            metavar=f"{self.get_command_list()}",
            type=str,
            nargs="?",
            choices=self.get_command_list(),
        )
        return parser

    def cli(self, argv=None) -> CliNameSpace:
        argv = sys.argv[1:] if argv is None else argv
        # only `sodbuild --help`, not `sodbuild build --help`
        if len(argv) == 1 and argv[0] in ["--help", "-h"]:
            self.parser().print_help()
            sys.exit(0)
        # parse only known args - this will NOT consume subcommand options
        args, unknown = self.parser(add_help=False).parse_known_args(
            argv, namespace=CliNameSpace()
        )
        args.rest = [x for x in argv if x != args.subcommand]
        return args

    def exec(self, context: CliContext, args: CliNameSpace) -> int:
        if not args.subcommand:
            print("ERROR: No command specified\n")
            self.parser().print_help()
            return 1

        module = importlib.import_module(f"sodbuild.commands.{args.subcommand}")
        klass = getattr(module, args.subcommand.capitalize())
        sub_cmd = klass()
        try:
            return sub_cmd.exec(context, sub_cmd.cli(args.rest))
        except SodBuildError as e:
            print(f"\n❌ ERROR: {e}")
            return 1


def main(argv=None):
    cmd = Cli()
    sys.exit(cmd.exec(CliContext(), cmd.cli(argv)))


if __name__ == "__main__":
    main()
