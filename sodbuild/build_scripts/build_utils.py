#!/usr/bin/env python3
# -- coding: utf-8 --
#
# build_utils.py
# sodbuild
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

"""
Build utility functions shared by the libsodium build scripts.

This module provides:
- Build settings loaded from SODBUILD.toml (with defaults)
- Console output helpers used for progress and warnings
- File operations (copy, clean)
"""

import os
import shutil
import sys
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from sodbuild.build_scripts.platforms import (
    DEFAULT_MIN_OS_VERSIONS,
    normalize_platform,
)

CONFIG_FILE_NAME = "SODBUILD.toml"

DEFAULT_LIBSODIUM_VERSION = "1.0.11"
DEFAULT_LIBSODIUM_URL = (
    "https://github.com/jedisct1/libsodium/releases/download/"
    "{version}/libsodium-{version}.tar.gz"
)
DEFAULT_DEVELOPER_DIR = "/Applications/Xcode.app/Contents/Developer"
DEFAULT_OTHER_CFLAGS = "-Os -Qunused-arguments"
DEFAULT_JOBS = 8
DEFAULT_STAGE_TIMEOUT_SECOND = 3 * 3600

LIB_NAME = "libsodium.a"
SOURCE_DIR_NAME = "libsodium"
BUILD_DIR_NAME = "libsodium_build"
DIST_DIR_NAME = "libsodium_dist"


@dataclass
class BuildSettings:
    """Everything a libsodium build needs, resolved once and passed around."""
    project_dir: str = "."
    version: str = DEFAULT_LIBSODIUM_VERSION
    url_template: str = DEFAULT_LIBSODIUM_URL
    source_dir: str = ""
    build_dir: str = ""
    dist_dir: str = ""
    developer_dir: str = ""  # empty means ask xcode-select
    other_cflags: str = DEFAULT_OTHER_CFLAGS
    jobs: int = DEFAULT_JOBS
    timeout: int = DEFAULT_STAGE_TIMEOUT_SECOND
    keep_build: bool = False
    skip_download: bool = False
    platforms: List[str] = field(default_factory=list)  # empty means all
    min_os_versions: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_MIN_OS_VERSIONS)
    )

    def __post_init__(self):
        self.project_dir = os.path.abspath(self.project_dir)
        if not self.source_dir:
            self.source_dir = os.path.join(self.project_dir, SOURCE_DIR_NAME)
        if not self.build_dir:
            self.build_dir = os.path.join(self.project_dir, BUILD_DIR_NAME)
        if not self.dist_dir:
            self.dist_dir = os.path.join(self.project_dir, DIST_DIR_NAME)


def parse_platforms(names, source) -> List[str]:
    platforms = []
    for name in names:
        platform = normalize_platform(name)
        if platform is None:
            print_warning(f"Ignoring unknown platform '{name}' in {source}")
            continue
        if platform not in platforms:
            platforms.append(platform)
    return platforms


def settings_from_toml(toml_data: dict, project_dir: str) -> BuildSettings:
    """
    Convert parsed SODBUILD.toml data into BuildSettings.

    Relative directories in the file are resolved against project_dir.
    """
    libsodium = toml_data.get("libsodium", {})
    build = toml_data.get("build", {})
    xcode = toml_data.get("xcode", {})

    def project_path(value):
        if not value:
            return ""
        return os.path.join(project_dir, value)

    min_os_versions = dict(DEFAULT_MIN_OS_VERSIONS)
    for name, version in toml_data.get("min_os_versions", {}).items():
        platform = normalize_platform(name)
        if platform is None:
            print_warning(f"Ignoring unknown platform '{name}' in [min_os_versions]")
            continue
        min_os_versions[platform] = str(version)

    return BuildSettings(
        project_dir=project_dir,
        version=str(libsodium.get("version", DEFAULT_LIBSODIUM_VERSION)),
        url_template=libsodium.get("url", DEFAULT_LIBSODIUM_URL),
        source_dir=project_path(libsodium.get("source_dir", "")),
        build_dir=project_path(build.get("build_dir", "")),
        dist_dir=project_path(build.get("dist_dir", "")),
        developer_dir=xcode.get("developer_dir", ""),
        other_cflags=build.get("other_cflags", DEFAULT_OTHER_CFLAGS),
        jobs=int(build.get("jobs", DEFAULT_JOBS)),
        timeout=int(build.get("timeout", DEFAULT_STAGE_TIMEOUT_SECOND)),
        keep_build=bool(build.get("keep_build", False)),
        skip_download=bool(libsodium.get("skip_download", False)),
        platforms=parse_platforms(build.get("platforms", []), "[build] platforms"),
        min_os_versions=min_os_versions,
    )


def load_build_settings(project_dir: Optional[str] = None) -> BuildSettings:
    """
    Load build settings from SODBUILD.toml in the project directory.

    Falls back to default values if the file is not found or cannot be parsed.
    """
    project_dir = os.path.abspath(project_dir or os.getcwd())
    config_file = os.path.join(project_dir, CONFIG_FILE_NAME)

    if not os.path.isfile(config_file):
        print(f"   ℹ️  {CONFIG_FILE_NAME} not found, using default configuration values")
        return BuildSettings(project_dir=project_dir)

    try:
        with open(config_file, "rb") as f:
            toml_data = tomllib.load(f)
        return settings_from_toml(toml_data, project_dir)
    except (tomllib.TOMLDecodeError, ValueError, TypeError) as e:
        print_warning(f"Error reading {CONFIG_FILE_NAME}: {e}")
        print_warning("Using default configuration values")
        return BuildSettings(project_dir=project_dir)


def print_section(title):
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}")


def print_ok(msg):
    print(f"  ✅ {msg}")


def print_error(msg):
    print(f"  ❌ {msg}")


def print_warning(msg):
    print(f"  ⚠️  {msg}")


def print_info(msg):
    print(f"  ℹ️  {msg}")


def format_elapsed_time(elapsed: float) -> str:
    """Format seconds as a human-readable duration."""
    if elapsed < 60:
        return f"{elapsed:.2f} seconds"
    if elapsed < 3600:
        minutes = int(elapsed // 60)
        seconds = elapsed % 60
        return f"{minutes} min {seconds:.1f} sec"
    hours = int(elapsed // 3600)
    minutes = int((elapsed % 3600) // 60)
    seconds = elapsed % 60
    return f"{hours} hr {minutes} min {seconds:.0f} sec"


def print_build_time(start_time: float):
    print(f"\n⏱ Build completed in {format_elapsed_time(time.time() - start_time)}")


def remove_path(path):
    """Remove a file or directory tree if it exists."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        os.remove(path)


def recreate_dir(path):
    """Remove a directory if present and create it again, empty."""
    remove_path(path)
    os.makedirs(path)


def copy_file(src, dst):
    """
    Copy a file or directory, creating destination directories as needed.

    If src is a directory, the entire tree is copied and any existing dst
    tree is replaced.
    """
    if not os.path.exists(src):
        return
    if os.path.isfile(src):
        os.makedirs(os.path.dirname(dst) or ".", exist_ok=True)
        shutil.copy(src, dst)
    else:
        remove_path(dst)
        shutil.copytree(src, dst)
