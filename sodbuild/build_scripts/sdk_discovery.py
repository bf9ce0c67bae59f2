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
Discovery of the Apple SDKs and tools installed on the host.

Only `xcodebuild -showsdks` decides which platforms get built. A platform
whose SDK is missing is left out of the result, which is a normal outcome.
"""

import os
import re

from sodbuild.build_scripts.build_errors import DiscoveryError
from sodbuild.build_scripts.build_utils import DEFAULT_DEVELOPER_DIR
from sodbuild.build_scripts.platforms import (
    PLATFORMS,
    SDK_LISTING_PREFIXES,
    SdkVersionSet,
)
from sodbuild.utils.cmd.cmd_util import exec_command_with_timeout_second

SHOW_SDKS_CMD = ["xcodebuild", "-showsdks"]
PRINT_DEVELOPER_DIR_CMD = ["xcode-select", "-print-path"]
FIND_LIPO_CMD = ["xcrun", "-sdk", "iphoneos", "-find", "lipo"]
QUERY_TIMEOUT_SECOND = 60

SDK_PATTERNS = {
    platform: re.compile(rf"-sdk {SDK_LISTING_PREFIXES[platform]}(\S+)")
    for platform in PLATFORMS
}


def run_query(command):
    return exec_command_with_timeout_second(command, QUERY_TIMEOUT_SECOND)


def parse_sdk_listing(text: str) -> SdkVersionSet:
    """
    Parse the output of `xcodebuild -showsdks`.

    Example lines:
        iOS 14.0                      -sdk iphoneos14.0
        macOS 11.0                    -sdk macosx11.0

    When an SDK shows up more than once the last line wins.
    """
    sdk_versions = {}
    for line in text.splitlines():
        for platform, pattern in SDK_PATTERNS.items():
            match = pattern.search(line)
            if match:
                sdk_versions[platform] = match.group(1)
                break
    return SdkVersionSet(sdk_versions)


def discover_sdks(runner=run_query) -> SdkVersionSet:
    """Query the host for installed platform SDK versions."""
    try:
        err_code, output = runner(SHOW_SDKS_CMD)
    except OSError as e:
        raise DiscoveryError(f"Cannot run '{' '.join(SHOW_SDKS_CMD)}': {e}") from e
    if err_code != 0:
        raise DiscoveryError(
            f"'{' '.join(SHOW_SDKS_CMD)}' failed ({err_code}): {output.strip()}"
        )
    return parse_sdk_listing(output)


def find_developer_dir(runner=run_query, default=DEFAULT_DEVELOPER_DIR) -> str:
    try:
        err_code, output = runner(PRINT_DEVELOPER_DIR_CMD)
    except OSError:
        return default
    path = output.strip()
    if err_code != 0 or not path:
        return default
    return path


def find_lipo(runner=run_query) -> str:
    try:
        err_code, output = runner(FIND_LIPO_CMD)
    except OSError:
        return "lipo"
    path = output.strip()
    if err_code != 0 or not os.path.isabs(path):
        return "lipo"
    return path


def print_sdk_versions(sdk_versions: SdkVersionSet):
    for platform in PLATFORMS:
        version = sdk_versions.get(platform, "not installed")
        print(f"{platform:<8}SDK version = {version}")
