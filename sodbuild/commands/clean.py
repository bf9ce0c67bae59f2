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

from sodbuild.build_scripts.build_utils import (
    load_build_settings,
    print_ok,
    print_section,
    print_warning,
    remove_path,
)
from sodbuild.utils.context.namespace import CliNameSpace
from sodbuild.utils.context.context import CliContext
from sodbuild.utils.context.command import CliCommand

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


class Clean(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to clean build artifacts.

        Cleans the following directories:
        - libsodium_build/    # Per-architecture builds
        - libsodium_dist/     # Merged libraries and headers
        - libsodium/          # Extracted source release (unless --keep-source)

        Examples:
            sodbuild clean              # Clean everything
            sodbuild clean --dry-run    # Preview what will be cleaned
        """

    def add_arguments(self, parser: argparse.ArgumentParser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be cleaned without actually deleting",
        )
        parser.add_argument(
            "--keep-source",
            action="store_true",
            help="Do not remove the extracted libsodium source",
        )

    def exec(self, context: CliContext, args: CliNameSpace) -> int:
        print("Cleaning build artifacts...\n")
        settings = load_build_settings(context.project_dir)
        cleaner = ProjectCleaner(dry_run=args.dry_run)
        cleaner.remove_directory(settings.build_dir)
        cleaner.remove_directory(settings.dist_dir)
        if not args.keep_source:
            cleaner.remove_directory(settings.source_dir)
        cleaner.print_summary()
        return 1 if cleaner.failed_dirs else 0


def dir_size(path) -> int:
    """Bytes used by the regular files under path, symlinks excluded."""
    total = 0
    for root, _, files in os.walk(path):
        for name in files:
            file_path = os.path.join(root, name)
            if not os.path.islink(file_path):
                total += os.path.getsize(file_path)
    return total


def format_size(size_bytes) -> str:
    size = float(size_bytes)
    for unit in SIZE_UNITS[:-1]:
        if size < 1024:
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} {SIZE_UNITS[-1]}"


class ProjectCleaner:
    """Removes generated directories and keeps a tally for the summary."""

    def __init__(self, dry_run=False):
        self.dry_run = dry_run
        self.removed = []  # (path, size in bytes)
        self.failed_dirs = []

    def remove_directory(self, dir_path) -> bool:
        if not os.path.isdir(dir_path):
            return False

        size = dir_size(dir_path)
        if self.dry_run:
            print(f"  [dry-run] would remove {dir_path} ({format_size(size)})")
        else:
            try:
                remove_path(dir_path)
            except OSError as e:
                print_warning(f"Failed to remove {dir_path}: {e}")
                self.failed_dirs.append(dir_path)
                return False
            print_ok(f"Removed {dir_path} ({format_size(size)})")
        self.removed.append((dir_path, size))
        return True

    def print_summary(self):
        print_section("Summary")
        if not self.removed and not self.failed_dirs:
            print("  Nothing to clean")
            return
        freed = format_size(sum(size for _, size in self.removed))
        if self.dry_run:
            print(f"  Would remove {len(self.removed)} director(ies), {freed}")
        else:
            print(f"  Removed {len(self.removed)} director(ies), {freed} freed")
        for path in self.failed_dirs:
            print_warning(f"Not removed: {path}")
