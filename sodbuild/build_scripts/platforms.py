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
Fixed platform tables and the value types built from them.

The order of PLATFORMS and of each architecture list is significant: build
targets, log output and dist layout all follow it.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

PLATFORMS = ("iOS", "macOS", "tvOS", "watchOS")

VALID_ARCHS_PER_PLATFORM = {
    "iOS": ["armv7", "armv7s", "arm64", "i386", "x86_64"],
    "macOS": ["x86_64"],
    "tvOS": ["arm64", "i386", "x86_64"],
    "watchOS": ["armv7k", "i386", "x86_64"],
}

DEFAULT_MIN_OS_VERSIONS = {
    "iOS": "8.0",
    "macOS": "10.10",
    "tvOS": "9.0",
    "watchOS": "2.0",
}

# SDK names as printed by `xcodebuild -showsdks`, e.g. "-sdk iphoneos14.0"
SDK_LISTING_PREFIXES = {
    "iOS": "iphoneos",
    "macOS": "macosx",
    "tvOS": "appletvos",
    "watchOS": "watchos",
}


def normalize_platform(name: str) -> Optional[str]:
    """Map a case-insensitive platform name to its canonical spelling."""
    for platform in PLATFORMS:
        if platform.lower() == name.strip().lower():
            return platform
    return None


class SdkVersionSet(Mapping):
    """
    Immutable mapping of platform name to installed SDK version.

    A platform without an entry has no SDK installed and is skipped. Iteration
    always follows PLATFORMS order, whatever order the versions were given in.
    """

    def __init__(self, versions: Optional[Dict[str, str]] = None):
        versions = dict(versions or {})
        unknown = [name for name in versions if name not in PLATFORMS]
        if unknown:
            raise ValueError(f"Unknown platform(s): {', '.join(unknown)}")
        self._versions = {
            platform: versions[platform]
            for platform in PLATFORMS
            if versions.get(platform)
        }

    def __getitem__(self, platform: str) -> str:
        return self._versions[platform]

    def __iter__(self) -> Iterator[str]:
        return iter(self._versions)

    def __len__(self) -> int:
        return len(self._versions)

    def __repr__(self):
        return f"SdkVersionSet({self._versions!r})"


@dataclass(frozen=True)
class BuildTarget:
    """One (platform, architecture) pair to build."""
    platform: str
    arch: str

    @property
    def label(self) -> str:
        return f"{self.platform}-{self.arch}"

    def __str__(self):
        return self.label
