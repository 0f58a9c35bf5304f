"""
Diagnostics snapshot tests (fixed keys, graceful degradation, freshness).

Conventions
- Test method names follow CamelCase per project convention.
"""
import os
import unittest
from unittest import TestCase

import psutil

from strata.diagnostics import KEYS, collect


def _unresolvable():
    raise OSError("name lookup failed")


class _Unreadable:
    def memory_info(self):
        raise psutil.AccessDenied()


class TestCollect(TestCase):
    """Behavioral tests for collect()."""

    def testKeysAreFixedAndOrdered(self):
        snapshot = collect()
        self.assertEqual(tuple(snapshot), ("PLATFORM", "RUNTIME", "MEM"))
        self.assertEqual(tuple(snapshot), KEYS)

    def testValuesAreStrings(self):
        for key, value in collect().items():
            with self.subTest(key=key):
                self.assertIsInstance(value, str)

    def testPlatformCarriesHostname(self):
        snapshot = collect(hostname=lambda: "storage-01")
        self.assertTrue(snapshot["PLATFORM"].startswith("Host: storage-01 | OS: "))
        self.assertIn("| Arch: ", snapshot["PLATFORM"])

    def testHostnameFailureDegradesToEmptyHost(self):
        snapshot = collect(hostname=_unresolvable)
        self.assertEqual(tuple(snapshot), KEYS)
        self.assertTrue(snapshot["PLATFORM"].startswith("Host:  | OS: "))
        self.assertTrue(snapshot["RUNTIME"])
        self.assertTrue(snapshot["MEM"])

    def testMemoryFailureDegradesToEmptyValue(self):
        snapshot = collect(process=_Unreadable())
        self.assertEqual(tuple(snapshot), KEYS)
        self.assertEqual(snapshot["MEM"], "")
        self.assertTrue(snapshot["PLATFORM"])

    def testRuntimeReportsCpus(self):
        self.assertTrue(collect()["RUNTIME"].endswith("| CPUs: %d" % (os.cpu_count() or 1)))

    def testMemoryIsHumanized(self):
        mem = collect()["MEM"]
        for label in ("Resident: ", "Virtual: ", "Host-Total: ", "Host-Available: "):
            self.assertIn(label, mem)
        self.assertRegex(mem, r"Resident: [\d.]+ [kMGT]?B")

    def testSnapshotIsReadOnly(self):
        with self.assertRaises(TypeError):
            collect()["MEM"] = "tampered"

    def testRecomputedOnEveryCall(self):
        calls = []

        def hostname():
            calls.append(None)
            return "host-%d" % len(calls)

        first = collect(hostname=hostname)
        second = collect(hostname=hostname)
        self.assertEqual(len(calls), 2)
        self.assertNotEqual(first["PLATFORM"], second["PLATFORM"])


if __name__ == "__main__":
    unittest.main()
