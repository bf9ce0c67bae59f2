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

from dataclasses import dataclass, field
from typing import List, Tuple

from sodbuild.build_scripts.aggregator import PlatformArtifact
from sodbuild.build_scripts.build_driver import BuildResult
from sodbuild.build_scripts.build_utils import (
    print_error,
    print_info,
    print_ok,
    print_section,
    print_warning,
)


@dataclass
class BuildReport:
    """Outcome of a whole run, printed at the end and turned into an exit code."""
    results: List[BuildResult] = field(default_factory=list)
    artifacts: List[PlatformArtifact] = field(default_factory=list)
    skipped_platforms: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def failed_targets(self) -> List[BuildResult]:
        return [r for r in self.results if not r.succeeded]

    @property
    def succeeded_platforms(self) -> List[str]:
        return [a.platform for a in self.artifacts]

    def exit_code(self) -> int:
        return 0 if self.artifacts else 1

    def print_summary(self):
        print_section("Summary")

        if self.artifacts:
            for artifact in self.artifacts:
                archs = ", ".join(t.arch for t in artifact.targets)
                print_ok(f"{artifact.platform}: {artifact.library_path} [{archs}]")
                print_info(f"headers: {artifact.include_dir}")
        else:
            print_error("No platform library was produced")

        for platform, reason in self.skipped_platforms:
            print_warning(f"{platform} skipped: {reason}")

        for result in self.failed_targets:
            print_error(f"{result.target.label} failed: {result.reason}")

        built = len(self.results) - len(self.failed_targets)
        print(
            f"\n  {built}/{len(self.results)} targets built, "
            f"{len(self.artifacts)} platform(s) packaged"
        )
