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

import os
import signal
import subprocess
import time
from threading import Timer

DEFAULT_TIMEOUT_SECOND = 10
# 3 hours, a full configure/make of libsodium is well below this
LONG_TIMEOUT_SECOND = 3 * 3600
# returncode of a process killed by SIGKILL
TIMEOUT_ERR_CODE = -9


def decode_bytes(input: bytes) -> str:
    if not input:
        return ""
    try:
        return bytes.decode(input, "UTF-8")
    except UnicodeDecodeError:
        return bytes.decode(input, "latin-1")


def exec_command(command, cwd=None, env=None):
    # timeout is 3 hours
    return exec_command_with_timeout_second(
        command, LONG_TIMEOUT_SECOND, cwd=cwd, env=env
    )


def exec_command_with_timeout_second(
    command,
    timeout_second=DEFAULT_TIMEOUT_SECOND,
    cwd=None,
    env=None,
    stdout=subprocess.PIPE,
    stderr=subprocess.STDOUT,
):
    """
    Run a command and kill it if it does not finish in time.

    Args:
        command: argv list, or a shell command string
        timeout_second: seconds before the process is killed
        cwd: working directory for the process
        env: full environment for the process (None inherits ours)

    Returns:
        tuple: (err_code, err_msg) where err_msg is the combined output.
            A killed process reports TIMEOUT_ERR_CODE.
    """
    start_mills = int(time.time() * 1000)
    timed_out = []

    def kill(process):
        timed_out.append(True)
        # configure and make leave grandchildren holding our stdout pipe
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            # the whole group already exited
            pass

    compile_popen = subprocess.Popen(
        command,
        shell=isinstance(command, str),
        cwd=cwd,
        env=env,
        stdout=stdout,
        stderr=stderr,
        start_new_session=True,
    )
    timer = Timer(timeout_second, kill, [compile_popen])
    try:
        timer.start()
        out, err = compile_popen.communicate()
    finally:
        timer.cancel()
    err_code = compile_popen.returncode
    err_msg = decode_bytes(out)
    if timed_out:
        err_code = TIMEOUT_ERR_CODE
        if not err_msg and err:
            err_msg = decode_bytes(err)
        use_time = int(time.time() * 1000) - start_mills
        err_msg = f"{err_msg}\nFailed for timeout({timeout_second}s), use_time: {use_time}ms".lstrip()
    return err_code, err_msg
