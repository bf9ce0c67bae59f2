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
Toolchain resolution for (platform, architecture) build targets.

The same architecture name means different things on different platforms:
arm64 is built against iPhoneOS.sdk for iOS but AppleTVOS.sdk for tvOS, and
x86_64 is a simulator slice everywhere except macOS. The rules are therefore
keyed by the full (platform, arch) pair, and a pair without a rule is an
error, never a fallback.

Flags produced for iOS arm64 with the iOS 14.0 SDK:
    host    = arm-apple-darwin
    CFLAGS  = -arch arm64 -isysroot <sdk> -miphoneos-version-min=8.0 -Os -Qunused-arguments
    LDFLAGS = -mthumb -arch arm64 -isysroot <sdk>
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from sodbuild.build_scripts.build_errors import UnsupportedTargetError
from sodbuild.build_scripts.build_utils import (
    DEFAULT_DEVELOPER_DIR,
    DEFAULT_OTHER_CFLAGS,
    print_warning,
)
from sodbuild.build_scripts.platforms import (
    DEFAULT_MIN_OS_VERSIONS,
    VALID_ARCHS_PER_PLATFORM,
    BuildTarget,
    SdkVersionSet,
)
from sodbuild.utils.context.result import CliResult

# clang deployment target flag per SDK platform directory
MIN_VERSION_FLAGS = {
    "iPhoneOS": "-miphoneos-version-min",
    "iPhoneSimulator": "-mios-simulator-version-min",
    "MacOSX": "-mmacosx-version-min",
    "AppleTVOS": "-mtvos-version-min",
    "AppleTVSimulator": "-mtvos-simulator-version-min",
    "WatchOS": "-mwatchos-version-min",
    "WatchSimulator": "-mwatchos-simulator-version-min",
}

CONFIGURE_STATIC_ARGS = ("--disable-shared", "--enable-static")


@dataclass(frozen=True)
class ToolchainRule:
    sdk_platform: str
    # config.sub does not know every Apple arch name, e.g. arm64 -> arm
    host_arch: Optional[str] = None
    extra_ldflags: Tuple[str, ...] = ()
    link_sysroot: bool = True


def build_rule_table(rows) -> Dict[Tuple[str, str], ToolchainRule]:
    """Index rule rows by (platform, arch), refusing duplicate keys."""
    table = {}
    for platform, arch, rule in rows:
        key = (platform, arch)
        if key in table:
            raise ValueError(f"Duplicate toolchain rule for {platform}-{arch}")
        if rule.sdk_platform not in MIN_VERSION_FLAGS:
            raise ValueError(f"Unknown SDK platform '{rule.sdk_platform}' for {platform}-{arch}")
        table[key] = rule
    return table


TOOLCHAIN_RULES = build_rule_table([
    # iOS devices
    ("iOS", "armv7", ToolchainRule("iPhoneOS", extra_ldflags=("-mthumb",))),
    ("iOS", "armv7s", ToolchainRule("iPhoneOS", extra_ldflags=("-mthumb",))),
    ("iOS", "arm64", ToolchainRule("iPhoneOS", host_arch="arm", extra_ldflags=("-mthumb",))),
    # iOS simulators
    ("iOS", "i386", ToolchainRule("iPhoneSimulator", extra_ldflags=("-m32",), link_sysroot=False)),
    ("iOS", "x86_64", ToolchainRule("iPhoneSimulator", link_sysroot=False)),
    # macOS
    ("macOS", "x86_64", ToolchainRule("MacOSX")),
    # tvOS
    ("tvOS", "arm64", ToolchainRule("AppleTVOS", host_arch="arm")),
    ("tvOS", "i386", ToolchainRule("AppleTVSimulator", extra_ldflags=("-m32",), link_sysroot=False)),
    ("tvOS", "x86_64", ToolchainRule("AppleTVSimulator", link_sysroot=False)),
    # watchOS
    ("watchOS", "armv7k", ToolchainRule("WatchOS", host_arch="arm")),
    ("watchOS", "i386", ToolchainRule("WatchSimulator", extra_ldflags=("-m32",), link_sysroot=False)),
    ("watchOS", "x86_64", ToolchainRule("WatchSimulator", link_sysroot=False)),
])


@dataclass(frozen=True)
class ToolchainConfig:
    """Fully resolved compiler/linker settings for one build target."""
    target: BuildTarget
    sdk_platform: str
    sdk_root: str
    host: str
    cflags: str
    ldflags: str
    min_os_version: str
    developer_dir: str

    @property
    def toolchain_paths(self) -> List[str]:
        toolchain = f"{self.developer_dir}/Toolchains/XcodeDefault.xctoolchain"
        return [f"{toolchain}/usr/bin", f"{toolchain}/usr/sbin"]

    def environment(self, base_env: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Return a new environment for configure/make; base_env is not modified."""
        env = dict(os.environ if base_env is None else base_env)
        paths = self.toolchain_paths
        if env.get("PATH"):
            paths.append(env["PATH"])
        env["PATH"] = os.pathsep.join(paths)
        env["CFLAGS"] = self.cflags
        env["LDFLAGS"] = self.ldflags
        return env

    def configure_args(self, prefix: str) -> List[str]:
        return [f"--prefix={prefix}", *CONFIGURE_STATIC_ARGS, f"--host={self.host}"]


def sdk_root_path(developer_dir: str, sdk_platform: str, sdk_version: str) -> str:
    base_dir = f"{developer_dir}/Platforms/{sdk_platform}.platform/Developer"
    return f"{base_dir}/SDKs/{sdk_platform}{sdk_version}.sdk"


def resolve_toolchain(
    target: BuildTarget,
    sdk_versions: SdkVersionSet,
    min_os_versions: Dict[str, str] = DEFAULT_MIN_OS_VERSIONS,
    developer_dir: str = DEFAULT_DEVELOPER_DIR,
    other_cflags: str = DEFAULT_OTHER_CFLAGS,
    rules: Dict[Tuple[str, str], ToolchainRule] = TOOLCHAIN_RULES,
) -> ToolchainConfig:
    """
    Resolve the toolchain configuration of one build target.

    Raises:
        UnsupportedTargetError: the pair has no rule, or the platform has no
            installed SDK or no minimum OS version.
    """
    rule = rules.get((target.platform, target.arch))
    if rule is None:
        raise UnsupportedTargetError(target, "no toolchain rule for this platform and architecture")
    sdk_version = sdk_versions.get(target.platform)
    if not sdk_version:
        raise UnsupportedTargetError(target, f"{target.platform} SDK is not installed")
    min_os_version = min_os_versions.get(target.platform)
    if not min_os_version:
        raise UnsupportedTargetError(target, f"no minimum {target.platform} version configured")

    sdk_root = sdk_root_path(developer_dir, rule.sdk_platform, sdk_version)
    host = f"{rule.host_arch or target.arch}-apple-darwin"

    cflags = [
        f"-arch {target.arch}",
        f"-isysroot {sdk_root}",
        f"{MIN_VERSION_FLAGS[rule.sdk_platform]}={min_os_version}",
    ]
    if other_cflags:
        cflags.append(other_cflags)

    ldflags = [*rule.extra_ldflags, f"-arch {target.arch}"]
    if rule.link_sysroot:
        ldflags.append(f"-isysroot {sdk_root}")

    return ToolchainConfig(
        target=target,
        sdk_platform=rule.sdk_platform,
        sdk_root=sdk_root,
        host=host,
        cflags=" ".join(cflags),
        ldflags=" ".join(ldflags),
        min_os_version=min_os_version,
        developer_dir=developer_dir,
    )


def resolve_targets(
    targets,
    sdk_versions: SdkVersionSet,
    min_os_versions: Dict[str, str] = DEFAULT_MIN_OS_VERSIONS,
    developer_dir: str = DEFAULT_DEVELOPER_DIR,
    other_cflags: str = DEFAULT_OTHER_CFLAGS,
    rules: Dict[Tuple[str, str], ToolchainRule] = TOOLCHAIN_RULES,
) -> List[Tuple[BuildTarget, CliResult]]:
    """Resolve every target, keeping unsupported ones as failed results."""
    resolved = []
    for target in targets:
        try:
            config = resolve_toolchain(
                target,
                sdk_versions,
                min_os_versions,
                developer_dir=developer_dir,
                other_cflags=other_cflags,
                rules=rules,
            )
            resolved.append((target, CliResult.ok(config)))
        except UnsupportedTargetError as e:
            print_warning(f"Skipping {target.label}: {e.reason}")
            resolved.append((target, CliResult.fail(e)))
    return resolved


def missing_rules(
    arch_table: Dict[str, List[str]] = VALID_ARCHS_PER_PLATFORM,
    rules: Dict[Tuple[str, str], ToolchainRule] = TOOLCHAIN_RULES,
) -> List[BuildTarget]:
    """Declared (platform, arch) pairs that have no toolchain rule."""
    return [
        BuildTarget(platform, arch)
        for platform, archs in arch_table.items()
        for arch in archs
        if (platform, arch) not in rules
    ]
