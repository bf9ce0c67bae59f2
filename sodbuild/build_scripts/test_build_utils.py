#!/usr/bin/env python3
"""
Tests for SODBUILD.toml loading and shared helpers.

Run with: python3 -m pytest sodbuild/build_scripts/test_build_utils.py
"""

import os
import shutil
import tempfile
import unittest

from sodbuild.build_scripts.build_utils import (
    BUILD_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_JOBS,
    DEFAULT_LIBSODIUM_VERSION,
    DIST_DIR_NAME,
    SOURCE_DIR_NAME,
    copy_file,
    format_elapsed_time,
    load_build_settings,
    recreate_dir,
)
from sodbuild.build_scripts.platforms import DEFAULT_MIN_OS_VERSIONS

SAMPLE_CONFIG = """
[libsodium]
version = "1.0.18"
source_dir = "third_party/libsodium"

[build]
jobs = 4
timeout = 600
platforms = ["ios", "tvOS", "android"]
other_cflags = "-O2"
dist_dir = "out"

[xcode]
developer_dir = "/Applications/Xcode-beta.app/Contents/Developer"

[min_os_versions]
iOS = "12.0"
watchos = 4.0
"""


class TestLoadBuildSettings(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def write_config(self, content):
        with open(os.path.join(self.temp_dir, CONFIG_FILE_NAME), "w") as f:
            f.write(content)

    def assert_defaults(self, settings):
        self.assertEqual(settings.version, DEFAULT_LIBSODIUM_VERSION)
        self.assertEqual(settings.jobs, DEFAULT_JOBS)
        self.assertEqual(settings.platforms, [])
        self.assertEqual(settings.min_os_versions, DEFAULT_MIN_OS_VERSIONS)
        self.assertEqual(settings.source_dir, os.path.join(self.temp_dir, SOURCE_DIR_NAME))
        self.assertEqual(settings.build_dir, os.path.join(self.temp_dir, BUILD_DIR_NAME))
        self.assertEqual(settings.dist_dir, os.path.join(self.temp_dir, DIST_DIR_NAME))

    def test_missing_file_uses_defaults(self):
        self.assert_defaults(load_build_settings(self.temp_dir))

    def test_reads_config(self):
        self.write_config(SAMPLE_CONFIG)
        settings = load_build_settings(self.temp_dir)

        self.assertEqual(settings.version, "1.0.18")
        self.assertEqual(settings.jobs, 4)
        self.assertEqual(settings.timeout, 600)
        self.assertEqual(settings.platforms, ["iOS", "tvOS"])
        self.assertEqual(settings.other_cflags, "-O2")
        self.assertEqual(
            settings.developer_dir, "/Applications/Xcode-beta.app/Contents/Developer"
        )
        self.assertEqual(
            settings.source_dir, os.path.join(self.temp_dir, "third_party", "libsodium")
        )
        self.assertEqual(settings.dist_dir, os.path.join(self.temp_dir, "out"))
        self.assertEqual(settings.build_dir, os.path.join(self.temp_dir, BUILD_DIR_NAME))
        self.assertEqual(settings.min_os_versions["iOS"], "12.0")
        self.assertEqual(settings.min_os_versions["watchOS"], "4.0")
        self.assertEqual(settings.min_os_versions["macOS"], DEFAULT_MIN_OS_VERSIONS["macOS"])

    def test_defaults_are_not_shared(self):
        self.write_config('[min_os_versions]\niOS = "13.0"\n')
        load_build_settings(self.temp_dir)
        self.assertEqual(DEFAULT_MIN_OS_VERSIONS["iOS"], "8.0")

    def test_invalid_toml_falls_back(self):
        self.write_config("[build\njobs = ")
        self.assert_defaults(load_build_settings(self.temp_dir))

    def test_invalid_value_falls_back(self):
        self.write_config('[build]\njobs = "many"\n')
        self.assert_defaults(load_build_settings(self.temp_dir))


class TestHelpers(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_format_elapsed_time(self):
        self.assertEqual(format_elapsed_time(5), "5.00 seconds")
        self.assertEqual(format_elapsed_time(125), "2 min 5.0 sec")
        self.assertEqual(format_elapsed_time(3725), "1 hr 2 min 5 sec")

    def test_recreate_dir(self):
        path = os.path.join(self.temp_dir, "work")
        os.makedirs(os.path.join(path, "old"))
        recreate_dir(path)
        self.assertEqual(os.listdir(path), [])

    def test_copy_tree_replaces_destination(self):
        src = os.path.join(self.temp_dir, "src")
        dst = os.path.join(self.temp_dir, "a", "dst")
        os.makedirs(src)
        os.makedirs(dst)
        with open(os.path.join(src, "sodium.h"), "w") as f:
            f.write("")
        with open(os.path.join(dst, "stale.h"), "w") as f:
            f.write("")
        copy_file(src, dst)
        self.assertEqual(os.listdir(dst), ["sodium.h"])


if __name__ == "__main__":
    unittest.main()
