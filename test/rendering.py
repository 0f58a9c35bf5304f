"""
Help and version rendering tests (plain consoles, colors disabled).
"""
import io
import json
import unittest
from types import MappingProxyType
from unittest import TestCase

from rich.console import Console

from strata.application import Environment, bootstrap
from strata.descriptors import Command, Flag

USER = Environment(username=lambda: "tester", euid=lambda: 1000)


class TestRendering(TestCase):

    def setUp(self) -> None:
        self.calls = 0

        def diagnostics():
            self.calls += 1
            return MappingProxyType({"PLATFORM": "Host: h", "RUNTIME": "CPUs: %d" % self.calls, "MEM": ""})

        self.diagnostics = diagnostics

    def build(self, **options):
        options.setdefault("descr", "An object store.")
        return bootstrap(
            [
                Command("server", "start server"),
                Command("debugger", "internal tooling", hidden=True),
                Command("version", "print version"),
            ],
            [
                Flag("address", default=":9000", descr="listen address"),
                Flag("json", default=False, descr="json output"),
                Flag("backend", default="fs", scope="server", descr="storage backend"),
            ],
            name="strata",
            usage="Cloud Storage Server",
            version="1.2.3",
            release="RELEASE.2026-10-17",
            commit="abc1234",
            environment=USER,
            diagnostics=self.diagnostics,
            colorful=False,
            shell=False,
            **options,
        )

    def render(self, method, application, **options):
        console = Console(file=io.StringIO(), width=200, color_system=None)
        getattr(application, method)(console=console, **options)
        return console.file.getvalue()

    def testHelpSections(self):
        output = self.render("help", self.build())
        labels = ["NAME:", "DESCRIPTION:", "USAGE:", "COMMANDS:", "GLOBAL FLAGS:", "VERSION:", "PLATFORM:", "RUNTIME:", "MEM:"]
        positions = [output.index(label) for label in labels]
        self.assertEqual(positions, sorted(positions))
        self.assertIn("strata - Cloud Storage Server", output)
        self.assertIn("strata [global flags] command [command flags] [arguments...]", output)
        self.assertIn("1.2.3", output)

    def testHelpWithoutDescription(self):
        output = self.render("help", self.build(descr=None))
        self.assertNotIn("DESCRIPTION:", output)

    def testHelpSkipsHiddenCommands(self):
        output = self.render("help", self.build())
        self.assertIn("server", output)
        self.assertNotIn("debugger", output)

    def testHelpShowsOnlyGlobalFlags(self):
        output = self.render("help", self.build())
        self.assertIn("--address ':9000'", output)
        self.assertIn("--json", output)
        self.assertIn("--help, -h", output)
        self.assertNotIn("--backend", output)

    def testDiagnosticsAreLive(self):
        application = self.build()
        self.assertIn("CPUs: 1", self.render("help", application))
        self.assertIn("CPUs: 2", self.render("help", application))
        self.assertEqual(self.calls, 2)

    def testFancyHelpIsPaneled(self):
        output = self.render("help", self.build(fancy=True))
        self.assertIn("╭", output)
        self.assertIn("STRATA HELP", output)

    def testVersion(self):
        output = self.render("show_version", self.build())
        self.assertIn("strata — 1.2.3", output)
        self.assertIn("release: RELEASE.2026-10-17", output)
        self.assertIn("commit: abc1234", output)
        self.assertIn("PLATFORM:", output)

    def testVersionJson(self):
        document = json.loads(self.render("show_version", self.build(), json=True))
        self.assertEqual(document, {
            "name": "strata",
            "version": "1.2.3",
            "release": "RELEASE.2026-10-17",
            "commit": "abc1234",
            "platform": "Host: h",
            "runtime": "CPUs: 1",
            "mem": "",
        })


if __name__ == "__main__":
    unittest.main()
