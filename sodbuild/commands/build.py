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
import argparse

from sodbuild.build_scripts.build_libsodium import build_libsodium
from sodbuild.build_scripts.build_utils import load_build_settings, parse_platforms
from sodbuild.utils.context.namespace import CliNameSpace
from sodbuild.utils.context.context import CliContext
from sodbuild.utils.context.command import CliCommand


class Build(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to build libsodium for Apple platforms.

        Every platform whose SDK is installed is built for all of its
        architectures, then merged into one universal library per platform:
            libsodium_dist/<platform>/lib/libsodium.a
            libsodium_dist/<platform>/include/

        A failing architecture does not stop the build; failures are listed
        in the final summary. The exit code is non-zero only if no platform
        library was produced.

        Examples:
            sodbuild build                          # Build all installed platforms
            sodbuild build --platforms iOS,macOS    # Build selected platforms
            sodbuild build --skip-download --source ./libsodium
            sodbuild build --timeout 1800 -j 4
        """

    def add_arguments(self, parser: argparse.ArgumentParser):
        parser.add_argument(
            "--platforms",
            type=str,
            help="Comma-separated list of platforms to build (e.g., iOS,tvOS)",
        )
        parser.add_argument(
            "--version",
            type=str,
            help="libsodium release version to download",
        )
        parser.add_argument(
            "--source",
            type=str,
            help="libsodium source directory (default: ./libsodium)",
        )
        parser.add_argument(
            "--skip-download",
            action="store_true",
            help="use the existing source directory instead of downloading a release",
        )
        parser.add_argument(
            "--keep-build",
            action="store_true",
            help="keep the per-architecture build directory after merging",
        )
        parser.add_argument(
            "-j", "--jobs",
            type=int,
            default=None,
            help="Number of parallel make jobs per target",
        )
        parser.add_argument(
            "--timeout",
            type=int,
            default=None,
            help="Timeout in seconds for each configure/make stage",
        )

    def apply_args(self, settings, args: CliNameSpace):
        if args.platforms:
            settings.platforms = parse_platforms(args.platforms.split(","), "--platforms")
        if args.version:
            settings.version = args.version
        if args.source:
            settings.source_dir = os.path.abspath(args.source)
        if args.skip_download:
            settings.skip_download = True
        if args.keep_build:
            settings.keep_build = True
        if args.jobs is not None:
            settings.jobs = max(1, args.jobs)
        if args.timeout is not None:
            settings.timeout = max(1, args.timeout)
        return settings

    def exec(self, context: CliContext, args: CliNameSpace) -> int:
        settings = self.apply_args(load_build_settings(context.project_dir), args)
        report = build_libsodium(settings)
        return report.exit_code()
