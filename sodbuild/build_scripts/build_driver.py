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
Per-target configure/make driver.

Targets are built one after another. configure runs out of tree, so every
target has a private object directory and install prefix under
{build_root}/{platform}-{arch}/ and the extracted source stays untouched.

A failing stage only fails its own target. The run goes on with the next
target and the failure is reported at the end, instead of aborting the
whole build on the first error.
"""

import contextlib
import os
import shlex
import time
from dataclasses import dataclass
from typing import List, Optional

from sodbuild.build_scripts.build_errors import ExternalBuildError
from sodbuild.build_scripts.build_utils import (
    DEFAULT_JOBS,
    DEFAULT_STAGE_TIMEOUT_SECOND,
    LIB_NAME,
    format_elapsed_time,
    print_error,
    print_ok,
    recreate_dir,
    remove_path,
)
from sodbuild.build_scripts.platforms import BuildTarget
from sodbuild.utils.cmd.cmd_util import (
    TIMEOUT_ERR_CODE,
    exec_command_with_timeout_second,
)

STAGE_PREPARE = "prepare"
STAGE_COMPILE = "compile"
STAGE_INSTALL = "install"
STAGE_RESOLVE = "resolve"

# last lines of a failed stage's output shown in the console
ERROR_TAIL_LINES = 10

OBJECT_DIR_NAME = "build"
INSTALL_DIR_NAME = "install"


@dataclass(frozen=True)
class BuildResult:
    target: BuildTarget
    succeeded: bool
    library_path: Optional[str] = None
    include_dir: Optional[str] = None
    stage: Optional[str] = None
    reason: str = ""
    timed_out: bool = False


@contextlib.contextmanager
def clean_build_dir(path):
    """
    Give a target an empty private directory.

    The directory is left in place on success because the aggregator still
    needs the installed library and headers. If the body raises, the partial
    install prefix is removed so nothing half-installed can be picked up,
    while the object directory and its config.log stay for inspection.
    """
    recreate_dir(path)
    try:
        yield path
    except BaseException:
        remove_path(os.path.join(path, INSTALL_DIR_NAME))
        raise


class AutotoolsBuild:
    """
    Runs libsodium's own configure/make for one resolved target.

    Calling the instance returns the path of the installed static library,
    or raises ExternalBuildError naming the stage that failed.
    """

    def __init__(
        self,
        source_dir,
        lib_name=LIB_NAME,
        jobs=DEFAULT_JOBS,
        timeout_second=DEFAULT_STAGE_TIMEOUT_SECOND,
        runner=exec_command_with_timeout_second,
        base_env=None,
    ):
        self.source_dir = os.path.abspath(source_dir)
        self.lib_name = lib_name
        self.jobs = max(1, int(jobs or 1))
        self.timeout_second = timeout_second
        self.runner = runner
        self.base_env = base_env

    @staticmethod
    def object_dir(workdir):
        return os.path.join(workdir, OBJECT_DIR_NAME)

    @staticmethod
    def install_dir(workdir):
        return os.path.join(workdir, INSTALL_DIR_NAME)

    def stage_commands(self, config, workdir):
        configure = [os.path.join(self.source_dir, "configure")]
        configure += config.configure_args(self.install_dir(workdir))
        return [
            (STAGE_PREPARE, configure),
            (STAGE_COMPILE, ["make", f"-j{self.jobs}", "V=0"]),
            (STAGE_INSTALL, ["make", "install"]),
        ]

    def run_stage(self, stage, command, cwd, env):
        print(f"   [{stage}] {shlex.join(command)}")
        try:
            err_code, output = self.runner(
                command, self.timeout_second, cwd=cwd, env=env
            )
        except OSError as e:
            raise ExternalBuildError(stage, None, str(e)) from e
        if err_code != 0:
            raise ExternalBuildError(
                stage, err_code, output, timed_out=err_code == TIMEOUT_ERR_CODE
            )

    def __call__(self, config, workdir) -> str:
        object_dir = self.object_dir(workdir)
        os.makedirs(object_dir, exist_ok=True)
        env = config.environment(self.base_env)
        for stage, command in self.stage_commands(config, workdir):
            self.run_stage(stage, command, object_dir, env)

        library_path = os.path.join(self.install_dir(workdir), "lib", self.lib_name)
        if not os.path.isfile(library_path):
            raise ExternalBuildError(
                STAGE_INSTALL, 0, f"{library_path} was not installed"
            )
        return library_path


def _failure_reason(error: ExternalBuildError, timeout_second=None) -> str:
    if error.timed_out:
        if timeout_second:
            return f"timeout in {error.stage} stage after {timeout_second}s"
        return f"timeout in {error.stage} stage"
    if error.exit_code is None:
        return f"{error.stage} stage could not start: {error.output}"
    if error.exit_code == 0:
        return f"{error.stage} stage: {error.output}"
    return f"{error.stage} stage exited with {error.exit_code}"


def _print_output_tail(output):
    lines = [line for line in (output or "").splitlines() if line.strip()]
    for line in lines[-ERROR_TAIL_LINES:]:
        print(f"      {line}")


def build_target(target, config, build_root, builder) -> BuildResult:
    workdir = os.path.join(build_root, target.label)
    try:
        with clean_build_dir(workdir):
            library_path = builder(config, workdir)
    except ExternalBuildError as e:
        error = e
    except OSError as e:
        # workdir could not be prepared, or the builder hit the filesystem
        error = ExternalBuildError(STAGE_PREPARE, None, str(e))
    else:
        include_dir = os.path.join(
            os.path.dirname(os.path.dirname(library_path)), "include"
        )
        return BuildResult(
            target, True, library_path=library_path, include_dir=include_dir
        )

    reason = _failure_reason(error, getattr(builder, "timeout_second", None))
    print_error(f"{target.label}: {reason}")
    _print_output_tail(error.output)
    return BuildResult(
        target, False, stage=error.stage, reason=reason, timed_out=error.timed_out
    )


def build_targets(resolved, build_root, builder) -> List[BuildResult]:
    """
    Build every resolved target in order.

    Args:
        resolved: (BuildTarget, CliResult) pairs from toolchain.resolve_targets
        build_root: directory holding one subdirectory per target
        builder: callable(ToolchainConfig, workdir) -> library path

    Returns:
        One BuildResult per target, in the same order.
    """
    results = []
    total = len(resolved)
    for index, (target, resolution) in enumerate(resolved, 1):
        if resolution.is_failure():
            error = resolution.get_error()
            results.append(BuildResult(
                target, False, stage=STAGE_RESOLVE,
                reason=f"unsupported: {error.reason}",
            ))
            continue

        print(f"\nBuilding {target.platform}/{target.arch} ({index}/{total})...")
        start_time = time.time()
        result = build_target(target, resolution.unwrap(), build_root, builder)
        if result.succeeded:
            elapsed = format_elapsed_time(time.time() - start_time)
            print_ok(f"{target.label} built in {elapsed}")
        results.append(result)
    return results
