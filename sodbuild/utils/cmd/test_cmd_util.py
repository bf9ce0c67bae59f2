#!/usr/bin/env python3
"""
Tests for running external commands with a timeout.

Run with: python3 -m pytest sodbuild/utils/cmd/test_cmd_util.py
"""

import os
import tempfile
import time
import unittest

from sodbuild.utils.cmd.cmd_util import (
    TIMEOUT_ERR_CODE,
    decode_bytes,
    exec_command,
    exec_command_with_timeout_second,
)


class TestExecCommand(unittest.TestCase):

    def test_argv_list(self):
        err_code, output = exec_command(["echo", "hello"])
        self.assertEqual(err_code, 0)
        self.assertEqual(output.strip(), "hello")

    def test_shell_string_and_exit_code(self):
        err_code, output = exec_command("echo oops >&2; exit 3")
        self.assertEqual(err_code, 3)
        self.assertIn("oops", output)

    def test_cwd_and_env(self):
        cwd = os.path.realpath(tempfile.gettempdir())
        env = {"PATH": os.environ.get("PATH", "/usr/bin:/bin"), "CFLAGS": "-arch arm64"}
        err_code, output = exec_command("pwd; echo $CFLAGS", cwd=cwd, env=env)
        self.assertEqual(err_code, 0)
        self.assertEqual(output.split(), [cwd, "-arch", "arm64"])

    def test_timeout_kills_process(self):
        err_code, output = exec_command_with_timeout_second(["sleep", "5"], 0.2)
        self.assertEqual(err_code, TIMEOUT_ERR_CODE)
        self.assertIn("Failed for timeout(0.2s)", output)

    def test_timeout_kills_child_processes(self):
        start = time.time()
        err_code, output = exec_command_with_timeout_second(
            ["sh", "-c", "sleep 6; echo done"], 0.5
        )
        self.assertLess(time.time() - start, 3)
        self.assertEqual(err_code, TIMEOUT_ERR_CODE)
        self.assertNotIn("done", output)

    def test_missing_program(self):
        with self.assertRaises(OSError):
            exec_command(["sodbuild-no-such-program"])


class TestDecodeBytes(unittest.TestCase):

    def test_decode(self):
        self.assertEqual(decode_bytes(b""), "")
        self.assertEqual(decode_bytes(None), "")
        self.assertEqual(decode_bytes("é".encode()), "é")
        self.assertEqual(decode_bytes(b"\xe9"), "é")


if __name__ == "__main__":
    unittest.main()
