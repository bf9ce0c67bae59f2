#!/usr/bin/env python3
"""
Tests for platform tables and target enumeration.

Run with: python3 -m pytest sodbuild/build_scripts/test_targets.py
"""

import unittest

from sodbuild.build_scripts.build_errors import DiscoveryError
from sodbuild.build_scripts.platforms import (
    PLATFORMS,
    VALID_ARCHS_PER_PLATFORM,
    BuildTarget,
    SdkVersionSet,
    normalize_platform,
)
from sodbuild.build_scripts.targets import enumerate_targets, require_platforms


class TestSdkVersionSet(unittest.TestCase):

    def test_iterates_in_platform_order(self):
        sdks = SdkVersionSet({"watchOS": "7.0", "iOS": "14.0", "macOS": "11.0"})
        self.assertEqual(list(sdks), ["iOS", "macOS", "watchOS"])
        self.assertEqual(sdks["iOS"], "14.0")
        self.assertNotIn("tvOS", sdks)
        self.assertIsNone(sdks.get("tvOS"))

    def test_rejects_unknown_platform(self):
        with self.assertRaises(ValueError):
            SdkVersionSet({"visionOS": "1.0"})

    def test_empty_versions_are_dropped(self):
        self.assertEqual(len(SdkVersionSet({"iOS": ""})), 0)

    def test_is_read_only(self):
        sdks = SdkVersionSet({"iOS": "14.0"})
        with self.assertRaises(TypeError):
            sdks["tvOS"] = "14.0"


class TestBuildTarget(unittest.TestCase):

    def test_label(self):
        self.assertEqual(BuildTarget("tvOS", "arm64").label, "tvOS-arm64")

    def test_normalize_platform(self):
        self.assertEqual(normalize_platform("ios"), "iOS")
        self.assertEqual(normalize_platform(" WATCHOS "), "watchOS")
        self.assertIsNone(normalize_platform("android"))


class TestEnumerateTargets(unittest.TestCase):

    def test_platform_then_arch_order(self):
        sdks = SdkVersionSet({p: "1.0" for p in PLATFORMS})
        labels = [t.label for t in enumerate_targets(sdks)]
        expected = [
            f"{platform}-{arch}"
            for platform, archs in VALID_ARCHS_PER_PLATFORM.items()
            for arch in archs
        ]
        self.assertEqual(labels, expected)
        self.assertEqual(labels[:2], ["iOS-armv7", "iOS-armv7s"])

    def test_stable_across_runs(self):
        sdks = SdkVersionSet({"tvOS": "14.0", "iOS": "14.0"})
        self.assertEqual(enumerate_targets(sdks), enumerate_targets(sdks))

    def test_skips_missing_platforms(self):
        sdks = SdkVersionSet({"macOS": "11.0"})
        self.assertEqual(enumerate_targets(sdks), [BuildTarget("macOS", "x86_64")])

    def test_platform_filter(self):
        sdks = SdkVersionSet({"iOS": "14.0", "tvOS": "14.0"})
        targets = enumerate_targets(sdks, platforms=["tvOS"])
        self.assertEqual(
            [t.label for t in targets], ["tvOS-arm64", "tvOS-i386", "tvOS-x86_64"]
        )

    def test_no_sdks(self):
        sdks = SdkVersionSet({})
        self.assertEqual(enumerate_targets(sdks), [])
        with self.assertRaises(DiscoveryError):
            require_platforms(sdks)

    def test_require_platforms_accepts_one(self):
        self.assertEqual(require_platforms(SdkVersionSet({"watchOS": "7.0"})), ["watchOS"])

    def test_require_platforms_applies_filter(self):
        sdks = SdkVersionSet({"iOS": "14.0", "tvOS": "14.0"})
        self.assertEqual(require_platforms(sdks, ["tvOS", "macOS"]), ["tvOS"])
        with self.assertRaises(DiscoveryError) as ctx:
            require_platforms(sdks, ["watchOS"])
        self.assertIn("watchOS", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
