"""
End-to-end tests of the strata binary (click runner over the real command set).

Scope
- Help lists commands and global flags in registration order.
- version prints build identifiers and diagnostics (text and JSON).
- Flags and STRATA_* environment variables reach the server configuration.
- Unknown commands and failed preconditions exit with status 1.
"""
import io
import json
import logging
import re
import unittest
from unittest import TestCase, mock

from click.testing import CliRunner
from rich.console import Console

from strata import faults
from strata.application import Environment, dispatcher
from strata.cli import COMMANDS, FLAGS, build

USER = Environment(username=lambda: "tester", euid=lambda: 1000)


class TestStrata(TestCase):

    def setUp(self) -> None:
        self.handlers = logging.root.handlers[:]
        self.level = logging.root.level
        self.group = dispatcher(build(environment=USER, colorful=False))
        self.runner = CliRunner()

    def tearDown(self) -> None:
        logging.root.handlers[:] = self.handlers
        logging.root.setLevel(self.level)

    def invoke(self, *args, **options):
        return self.runner.invoke(self.group, list(args), **options)

    def testHelpListsCommandsInOrder(self):
        result = self.invoke("--help")
        self.assertEqual(result.exit_code, 0, result.output)
        section = result.output.split("COMMANDS:", 1)[1].split("GLOBAL FLAGS:", 1)[0]
        self.assertEqual(
            re.findall(r"^\s+([a-z]+)\s", section, re.M),
            [command.name for command in COMMANDS],
        )

    def testHelpListsGlobalFlagsInOrder(self):
        result = self.invoke("-h")
        section = result.output.split("GLOBAL FLAGS:", 1)[1].split("VERSION:", 1)[0]
        self.assertEqual(
            re.findall(r"^\s+(--[\w-]+)", section, re.M),
            ["--" + flag.name for flag in FLAGS] + ["--help"],
        )

    def testHelpSectionsInOrder(self):
        output = self.invoke().output
        labels = ["NAME:", "DESCRIPTION:", "USAGE:", "COMMANDS:", "GLOBAL FLAGS:", "VERSION:", "PLATFORM:", "RUNTIME:", "MEM:"]
        positions = [output.index(label) for label in labels]
        self.assertEqual(positions, sorted(positions))
        self.assertIn("strata - Cloud Storage Server", output)

    def testVersion(self):
        result = self.invoke("version")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("strata — ", result.output)
        self.assertIn("release: ", result.output)
        self.assertIn("commit: ", result.output)
        self.assertIn("RUNTIME:", result.output)

    def testVersionJson(self):
        result = self.invoke("--json", "version")
        self.assertEqual(result.exit_code, 0, result.output)
        document = json.loads(result.output)
        self.assertEqual(document["name"], "strata")
        self.assertEqual(set(document), {"name", "version", "release", "commit", "platform", "runtime", "mem"})

    def testServerReportsDefaults(self):
        result = self.invoke("server")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn(":9000", result.output)
        self.assertIn("rate-limit", result.output)

    def testServerJson(self):
        result = self.invoke("--json", "--ratelimit", "32", "controller")
        self.assertEqual(result.exit_code, 0, result.output)
        document = json.loads(result.output)
        self.assertEqual(document["role"], "controller")
        self.assertEqual(document["rate-limit"], 32)
        self.assertEqual(document["controller-address"], ":9001")

    def testEnvironmentOverridesDefault(self):
        result = self.invoke("server", env={"STRATA_ADDRESS": "127.0.0.1:9100"})
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("127.0.0.1:9100", result.output)

    def testInvalidAddressIsFatal(self):
        result = self.invoke("--address", "bad", "server")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid Configuration", result.output)
        self.assertIn("is not a valid [host]:port pair", result.output)

    def testHalfTlsPairIsFatal(self):
        result = self.invoke("--cert", "public.crt", "gateway")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("tls needs both a certificate and a key", result.output)

    def testUnknownCommandSuggests(self):
        result = self.invoke("contro")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("did you mean one of these?", result.output)
        self.assertIn("controller", result.output)

    def testUnknownCommandWithoutCandidates(self):
        result = self.invoke("zzz")
        self.assertEqual(result.exit_code, 1)
        self.assertNotIn("did you mean", result.output)

    def testRootRefusesToStart(self):
        console = Console(file=io.StringIO(), width=120, color_system=None)
        with mock.patch.object(faults, "console", console):
            with self.assertRaises(SystemExit) as context:
                build(environment=Environment(username=lambda: "root", euid=lambda: 0), colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("Privileged User", console.file.getvalue())


if __name__ == "__main__":
    unittest.main()
