#!/usr/bin/env python3
"""
Tests for command line parsing and the build/clean subcommands.

Run with: python3 -m pytest sodbuild/commands/test_commands.py
"""

import os
import shutil
import tempfile
import unittest
from unittest.mock import Mock, patch

from sodbuild.build_scripts.build_errors import DiscoveryError
from sodbuild.build_scripts.build_utils import BuildSettings
from sodbuild.cli import Cli
from sodbuild.commands.build import Build
from sodbuild.commands.clean import Clean, format_size
from sodbuild.utils.context.context import CliContext


class TestCli(unittest.TestCase):

    def test_command_list(self):
        self.assertEqual(Cli().get_command_list(), ["build", "check", "clean"])

    def test_subcommand_and_rest(self):
        args = Cli().cli(["build", "--platforms", "iOS", "-j", "2"])
        self.assertEqual(args.subcommand, "build")
        self.assertEqual(args.rest, ["--platforms", "iOS", "-j", "2"])

    def test_no_subcommand(self):
        cli = Cli()
        self.assertEqual(cli.exec(CliContext(), cli.cli([])), 1)

    def test_errors_become_exit_code(self):
        cli = Cli()
        with patch("sodbuild.commands.build.build_libsodium",
                   side_effect=DiscoveryError("No platform SDK found")):
            with patch("sodbuild.commands.build.load_build_settings",
                       return_value=BuildSettings(project_dir=tempfile.gettempdir())):
                code = cli.exec(CliContext(), cli.cli(["build"]))
        self.assertEqual(code, 1)


class TestBuildCommand(unittest.TestCase):

    def setUp(self):
        self.settings = BuildSettings(project_dir=tempfile.gettempdir())

    def test_defaults_are_kept(self):
        build = Build()
        settings = build.apply_args(self.settings, build.cli([]))
        self.assertEqual(settings, BuildSettings(project_dir=tempfile.gettempdir()))

    def test_overrides(self):
        build = Build()
        args = build.cli([
            "--platforms", "ios,watchOS,linux",
            "--version", "1.0.18",
            "--source", "src/libsodium",
            "--skip-download",
            "--keep-build",
            "-j", "0",
            "--timeout", "900",
        ])
        settings = build.apply_args(self.settings, args)

        self.assertEqual(settings.platforms, ["iOS", "watchOS"])
        self.assertEqual(settings.version, "1.0.18")
        self.assertEqual(settings.source_dir, os.path.abspath("src/libsodium"))
        self.assertTrue(settings.skip_download)
        self.assertTrue(settings.keep_build)
        self.assertEqual(settings.jobs, 1)
        self.assertEqual(settings.timeout, 900)

    def test_exit_code_comes_from_report(self):
        report = Mock()
        report.exit_code.return_value = 0
        with patch("sodbuild.commands.build.build_libsodium", return_value=report) as run:
            with patch("sodbuild.commands.build.load_build_settings",
                       return_value=self.settings):
                build = Build()
                code = build.exec(CliContext(), build.cli(["--platforms", "macOS"]))
        self.assertEqual(code, 0)
        self.assertEqual(run.call_args[0][0].platforms, ["macOS"])


class TestCleanCommand(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        for name in ("libsodium", "libsodium_build", "libsodium_dist"):
            os.makedirs(os.path.join(self.temp_dir, name, "lib"))

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_dry_run_removes_nothing(self):
        clean = Clean()
        code = clean.exec(CliContext(self.temp_dir), clean.cli(["--dry-run"]))
        self.assertEqual(code, 0)
        self.assertEqual(len(os.listdir(self.temp_dir)), 3)

    def test_keep_source(self):
        clean = Clean()
        code = clean.exec(CliContext(self.temp_dir), clean.cli(["--keep-source"]))
        self.assertEqual(code, 0)
        self.assertEqual(os.listdir(self.temp_dir), ["libsodium"])

    def test_format_size(self):
        self.assertEqual(format_size(512), "512.00 B")
        self.assertEqual(format_size(3 * 1024 * 1024), "3.00 MB")


if __name__ == "__main__":
    unittest.main()
