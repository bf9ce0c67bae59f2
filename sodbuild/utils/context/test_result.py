#!/usr/bin/env python3
"""
Tests for CliResult.

Run with: python3 -m pytest sodbuild/utils/context/test_result.py
"""

import unittest

from sodbuild.build_scripts.build_errors import UnsupportedTargetError
from sodbuild.build_scripts.platforms import BuildTarget
from sodbuild.utils.context.result import CliResult


class TestCliResult(unittest.TestCase):

    def test_ok(self):
        result = CliResult.ok("config")
        self.assertTrue(result.is_success())
        self.assertEqual(result.unwrap(), "config")
        self.assertIsNone(result.get_error())

    def test_fail(self):
        error = UnsupportedTargetError(BuildTarget("iOS", "arm64e"), "no toolchain rule")
        result = CliResult.fail(error)
        self.assertTrue(result.is_failure())
        self.assertEqual(result.get_value("fallback"), "fallback")
        with self.assertRaises(UnsupportedTargetError):
            result.unwrap()

    def test_value_and_error_are_exclusive(self):
        with self.assertRaises(ValueError):
            CliResult(value=1, error=RuntimeError("boom"))


if __name__ == "__main__":
    unittest.main()
