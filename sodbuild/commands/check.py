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

import argparse
import shutil

from sodbuild.build_scripts.build_libsodium import resolve_build_matrix
from sodbuild.build_scripts.build_utils import (
    load_build_settings,
    print_error,
    print_info,
    print_ok,
    print_section,
    print_warning,
)
from sodbuild.build_scripts.sdk_discovery import (
    discover_sdks,
    find_lipo,
    print_sdk_versions,
)
from sodbuild.utils.context.namespace import CliNameSpace
from sodbuild.utils.context.context import CliContext
from sodbuild.utils.context.command import CliCommand

REQUIRED_TOOLS = ["xcodebuild", "xcrun", "make"]


class Check(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to check the installed SDKs and preview the
        build matrix without building anything.

        Examples:
            sodbuild check              # Show SDKs and resolved targets
            sodbuild check --verbose    # Also show CFLAGS/LDFLAGS
        """

    def add_arguments(self, parser: argparse.ArgumentParser):
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Show compiler and linker flags of every target",
        )

    def check_tools(self):
        print_section("Tools")
        missing = []
        for tool in REQUIRED_TOOLS:
            path = shutil.which(tool)
            if path:
                print_ok(f"{tool}: {path}")
            else:
                print_error(f"{tool}: Not found")
                missing.append(tool)
        print_info(f"lipo: {find_lipo()}")
        return missing

    def exec(self, context: CliContext, args: CliNameSpace) -> int:
        settings = load_build_settings(context.project_dir)
        self.check_tools()

        print_section("SDKs")
        sdk_versions = discover_sdks()
        print_sdk_versions(sdk_versions)

        print_section("Build matrix")
        resolved = resolve_build_matrix(settings, sdk_versions)
        unsupported = 0
        for target, resolution in resolved:
            if resolution.is_failure():
                unsupported += 1
                continue
            config = resolution.get_value()
            print_ok(f"{target.label:<16} host={config.host}")
            print_info(f"sdk: {config.sdk_root}")
            if args.verbose:
                print(f"      CFLAGS={config.cflags}")
                print(f"      LDFLAGS={config.ldflags}")

        if unsupported:
            print_warning(f"{unsupported} target(s) cannot be built")
        return 0 if len(resolved) > unsupported else 1
