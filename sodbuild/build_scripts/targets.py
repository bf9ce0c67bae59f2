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

from typing import Dict, Iterable, List, Optional

from sodbuild.build_scripts.build_errors import DiscoveryError
from sodbuild.build_scripts.platforms import (
    VALID_ARCHS_PER_PLATFORM,
    BuildTarget,
    SdkVersionSet,
)


def require_platforms(
    sdk_versions: SdkVersionSet, platforms: Optional[Iterable[str]] = None
) -> List[str]:
    """Return the installed platforms left after filtering, failing if none is."""
    if len(sdk_versions) == 0:
        raise DiscoveryError(
            "No iOS, macOS, tvOS or watchOS SDK found, is Xcode installed?"
        )
    if not platforms:
        return list(sdk_versions)
    platforms = list(platforms)
    wanted = set(platforms)
    usable = [platform for platform in sdk_versions if platform in wanted]
    if not usable:
        raise DiscoveryError(
            f"None of the requested platforms ({', '.join(platforms)}) has an "
            f"installed SDK, installed: {', '.join(sdk_versions)}"
        )
    return usable


def enumerate_targets(
    sdk_versions: SdkVersionSet,
    arch_table: Dict[str, List[str]] = VALID_ARCHS_PER_PLATFORM,
    platforms: Optional[Iterable[str]] = None,
) -> List[BuildTarget]:
    """
    List the build targets for every installed platform.

    Targets come platform first, then architecture, both in the insertion
    order of arch_table. `platforms` optionally narrows the installed set.
    """
    wanted = set(platforms) if platforms else None
    targets = []
    for platform, archs in arch_table.items():
        if platform not in sdk_versions:
            continue
        if wanted is not None and platform not in wanted:
            continue
        for arch in archs:
            targets.append(BuildTarget(platform, arch))
    return targets
