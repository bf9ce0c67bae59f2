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
Merge per-architecture libraries into one universal library per platform.

Output layout:
    {dist}/{platform}/lib/libsodium.a
    {dist}/{platform}/include/

Headers are taken from the first successful architecture of a platform
that installed an include directory; without one the platform is skipped.
libsodium installs the same headers for every architecture, so no check
is made; if they ever differ, the first architecture's copy wins.
"""

import os
from dataclasses import dataclass
from typing import List, Tuple

from sodbuild.build_scripts.build_errors import AggregationError
from sodbuild.build_scripts.build_utils import (
    LIB_NAME,
    copy_file,
    print_ok,
    print_warning,
)
from sodbuild.build_scripts.platforms import PLATFORMS, BuildTarget
from sodbuild.utils.cmd.cmd_util import exec_command


@dataclass(frozen=True)
class PlatformArtifact:
    platform: str
    library_path: str
    include_dir: str
    targets: Tuple[BuildTarget, ...]


def merge_libraries(src_libs, dst_lib, lipo="lipo", runner=exec_command) -> str:
    """
    Create a universal (fat) static library with `lipo -create`.

    Raises:
        AggregationError: lipo could not be run or exited non-zero.
    """
    os.makedirs(os.path.dirname(dst_lib), exist_ok=True)
    cmd = [lipo, "-create", *src_libs, "-output", dst_lib]
    print(" ".join(cmd))
    try:
        err_code, output = runner(cmd)
    except OSError as e:
        raise AggregationError(os.path.basename(dst_lib), f"cannot run lipo: {e}") from e
    if err_code != 0:
        raise AggregationError(
            os.path.basename(dst_lib), f"lipo exited with {err_code}: {output.strip()}"
        )
    return dst_lib


class ArtifactAggregator:
    def __init__(self, dist_dir, merge=merge_libraries, lib_name=LIB_NAME):
        self.dist_dir = dist_dir
        self.merge = merge
        self.lib_name = lib_name
        self.warnings = []
        self.skipped = []

    def warn(self, platform, reason):
        print_warning(f"{platform}: {reason}")
        self.warnings.append(f"{platform}: {reason}")
        self.skipped.append((platform, reason))

    def aggregate_platform(self, platform, successes) -> PlatformArtifact:
        headers = next(
            (r.include_dir for r in successes
             if r.include_dir and os.path.isdir(r.include_dir)),
            None,
        )
        if headers is None:
            raise AggregationError(
                platform, "no built architecture installed an include directory"
            )

        platform_dir = os.path.join(self.dist_dir, platform)
        dst_lib = os.path.join(platform_dir, "lib", self.lib_name)
        try:
            self.merge([r.library_path for r in successes], dst_lib)
        except AggregationError as e:
            raise AggregationError(platform, e.reason) from e

        include_dir = os.path.join(platform_dir, "include")
        copy_file(headers, include_dir)
        return PlatformArtifact(
            platform=platform,
            library_path=dst_lib,
            include_dir=include_dir,
            targets=tuple(r.target for r in successes),
        )

    def aggregate(self, results) -> List[PlatformArtifact]:
        """
        Merge the successful results of each platform.

        Platforms without any success, or whose merge fails, are skipped
        with one warning each.
        """
        by_platform = {}
        for result in results:
            by_platform.setdefault(result.target.platform, []).append(result)

        artifacts = []
        for platform in PLATFORMS:
            if platform not in by_platform:
                continue
            successes = [r for r in by_platform[platform] if r.succeeded]
            if not successes:
                self.warn(platform, "no architecture built successfully, skipping")
                continue
            try:
                artifact = self.aggregate_platform(platform, successes)
            except AggregationError as e:
                self.warn(platform, e.reason)
                continue
            archs = ", ".join(t.arch for t in artifact.targets)
            print_ok(f"{platform}: {artifact.library_path} ({archs})")
            artifacts.append(artifact)
        return artifacts
