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

import sys
import argparse

from sodbuild.utils.context.namespace import CliNameSpace
from sodbuild.utils.context.context import CliContext


# Base class of every subcommand
class CliCommand:
    def description(self) -> str:
        return ""

    def prog(self) -> str:
        return f"sodbuild {self.__class__.__name__.lower()}"

    def add_arguments(self, parser: argparse.ArgumentParser):
        pass

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog=self.prog(),
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        self.add_arguments(parser)
        if argv is None:
            module_name = self.__class__.__name__.lower()
            argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(argv, namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace) -> int:
        raise NotImplementedError
