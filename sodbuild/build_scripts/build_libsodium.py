#!/usr/bin/env python3
# -- coding: utf-8 --
#
# build_libsodium.py
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
libsodium build script for iOS, macOS, tvOS and watchOS.

This script builds universal static libraries of libsodium using its own
configure/make toolchain. It handles:
- Downloading and extracting a fixed libsodium release
- Discovering the installed platform SDKs with xcodebuild
- Resolving compiler/linker flags for each (platform, arch) target
- Building each target in its own directory
- Merging the per-arch static libraries with lipo, one per platform

Requirements:
- Xcode with command line tools
- macOS development environment

Output:
    - {dist}/{platform}/lib/libsodium.a
    - {dist}/{platform}/include/
"""

import functools
import time

from sodbuild.build_scripts.aggregator import ArtifactAggregator, merge_libraries
from sodbuild.build_scripts.build_driver import AutotoolsBuild, build_targets
from sodbuild.build_scripts.build_report import BuildReport
from sodbuild.build_scripts.build_utils import (
    BuildSettings,
    print_build_time,
    print_info,
    recreate_dir,
    remove_path,
)
from sodbuild.build_scripts.fetch_source import download_and_extract
from sodbuild.build_scripts.platforms import VALID_ARCHS_PER_PLATFORM
from sodbuild.build_scripts.sdk_discovery import (
    discover_sdks,
    find_developer_dir,
    find_lipo,
    print_sdk_versions,
    run_query,
)
from sodbuild.build_scripts.targets import enumerate_targets, require_platforms
from sodbuild.build_scripts.toolchain import resolve_targets


def resolve_build_matrix(
    settings: BuildSettings,
    sdk_versions,
    runner=run_query,
    arch_table=VALID_ARCHS_PER_PLATFORM,
):
    """Enumerate and resolve the targets of every installed platform."""
    require_platforms(sdk_versions, settings.platforms)
    developer_dir = settings.developer_dir or find_developer_dir(runner)
    targets = enumerate_targets(
        sdk_versions, arch_table=arch_table, platforms=settings.platforms
    )
    return resolve_targets(
        targets,
        sdk_versions,
        settings.min_os_versions,
        developer_dir=developer_dir,
        other_cflags=settings.other_cflags,
    )


def build_libsodium(
    settings: BuildSettings,
    sdk_versions=None,
    builder=None,
    merge=None,
    runner=run_query,
    session=None,
    arch_table=VALID_ARCHS_PER_PLATFORM,
) -> BuildReport:
    """
    Build libsodium for every installed Apple platform.

    Args:
        settings: resolved build settings
        sdk_versions: installed SDKs; discovered with xcodebuild when None
        builder: callable(ToolchainConfig, workdir) -> library path,
            AutotoolsBuild on the extracted source when None
        merge: callable(src_libs, dst_lib), lipo when None
        runner: command runner used for host queries
        session: requests session used to download the source
        arch_table: architectures to build per platform

    Returns:
        BuildReport: call exit_code() for the process status.

    Raises:
        DiscoveryError: no platform SDK is installed.
        FetchError: the source release could not be fetched.
    """
    start_time = time.time()
    print(f"==================build libsodium {settings.version}========================")

    if sdk_versions is None:
        sdk_versions = discover_sdks(runner)
    print_sdk_versions(sdk_versions)
    require_platforms(sdk_versions, settings.platforms)

    if not settings.skip_download:
        download_and_extract(
            settings.version, settings.source_dir, settings.url_template, session=session
        )

    recreate_dir(settings.build_dir)
    recreate_dir(settings.dist_dir)

    resolved = resolve_build_matrix(settings, sdk_versions, runner, arch_table)

    if builder is None:
        builder = AutotoolsBuild(
            settings.source_dir, jobs=settings.jobs, timeout_second=settings.timeout
        )
    results = build_targets(resolved, settings.build_dir, builder)

    if merge is None:
        merge = functools.partial(merge_libraries, lipo=find_lipo(runner))
    aggregator = ArtifactAggregator(settings.dist_dir, merge=merge)
    artifacts = aggregator.aggregate(results)

    if settings.keep_build:
        print_info(f"Keeping build directory {settings.build_dir}")
    else:
        remove_path(settings.build_dir)

    report = BuildReport(
        results=results,
        artifacts=artifacts,
        skipped_platforms=list(aggregator.skipped),
    )
    report.print_summary()
    print_build_time(start_time)
    return report
