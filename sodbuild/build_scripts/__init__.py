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

"""Build scripts for libsodium on Apple platforms."""

__all__ = [
    "aggregator",
    "build_driver",
    "build_errors",
    "build_libsodium",
    "build_report",
    "build_utils",
    "fetch_source",
    "platforms",
    "sdk_discovery",
    "targets",
    "toolchain",
]
