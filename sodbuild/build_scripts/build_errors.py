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
Error types raised while building libsodium.

Only DiscoveryError and FetchError stop the whole run. The others are
recorded per target or per platform and end up in the final report.
"""


class SodBuildError(Exception):
    """Base class of every sodbuild error"""
    pass


class DiscoveryError(SodBuildError):
    """No usable platform SDK was found on the host"""
    pass


class FetchError(SodBuildError):
    """The libsodium source release could not be downloaded or extracted"""
    pass


class UnsupportedTargetError(SodBuildError):
    """A (platform, architecture) pair has no toolchain configuration"""

    def __init__(self, target, reason):
        self.target = target
        self.reason = reason
        super().__init__(f"Unsupported target {target.label}: {reason}")


class ExternalBuildError(SodBuildError):
    """A configure/make stage of one target failed"""

    def __init__(self, stage, exit_code, output="", timed_out=False):
        self.stage = stage
        self.exit_code = exit_code
        self.output = output
        self.timed_out = timed_out
        if timed_out:
            message = f"{stage} timed out"
        else:
            message = f"{stage} failed with exit code {exit_code}"
        super().__init__(message)


class AggregationError(SodBuildError):
    """Merging the per-architecture libraries of one platform failed"""

    def __init__(self, platform, reason):
        self.platform = platform
        self.reason = reason
        super().__init__(f"Failed to aggregate {platform}: {reason}")
