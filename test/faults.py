"""
Fault layer tests (codes, triggering policy, rendering).

Conventions
- Test method names follow CamelCase per project convention.
"""
import io
import unittest
from unittest import TestCase, mock

from rich.console import Console

from strata import faults
from strata.faults import (
    FaultCode,
    StrataException,
    UnknownCommandError,
    PrivilegedUserError,
    PreconditionError,
    trigger,
    getdoc,
)


def _capture():
    return Console(file=io.StringIO(), width=120, color_system=None)


class TestFaultCode(TestCase):

    def testNormalizeDefaultsToNumericValue(self):
        self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "11101")

    def testNormalizeHonorsHostMapping(self):
        main = __import__("__main__")
        with mock.patch.object(main, "__codes__", {FaultCode.UNKNOWN_COMMAND: "E-CMD"}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_COMMAND.normalize(), "E-CMD")

    def testGetdoc(self):
        self.assertIsNone(getdoc(FaultCode.PRIVILEGED_USER))
        main = __import__("__main__")
        with mock.patch.object(main, "__docs__", {FaultCode.PRIVILEGED_USER: "never run as root"}, create=True):
            self.assertEqual(getdoc(FaultCode.PRIVILEGED_USER), "never run as root")
        with self.assertRaises(TypeError):
            getdoc(11302)


class TestTrigger(TestCase):

    def fault(self):
        return UnknownCommandError(
            "'contro' is not a strata sub-command",
            title="unknown command",
            code=FaultCode.UNKNOWN_COMMAND,
            suggestions=("controller",),
            hint="run 'strata --help' to see available commands",
        )

    def testRaisesOutsideShell(self):
        with self.assertRaises(UnknownCommandError) as context:
            trigger(self.fault(), shell=False)
        self.assertEqual(context.exception.suggestions, ("controller",))
        self.assertEqual(str(context.exception), "'contro' is not a strata sub-command")

    def testOptionsAreMergedIntoACopy(self):
        fault = self.fault()
        with self.assertRaises(UnknownCommandError) as context:
            trigger(fault, shell=False, prog="minio")
        self.assertIsNot(context.exception, fault)
        self.assertEqual(context.exception.options["prog"], "minio")
        self.assertIs(fault.options["prog"], faults.Unset)

    def testShellRendersAndExits(self):
        console = _capture()
        with mock.patch.object(faults, "console", console):
            with self.assertRaises(SystemExit) as context:
                trigger(self.fault(), shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        output = console.file.getvalue()
        self.assertIn("11101", output)
        self.assertIn("Unknown Command", output)
        self.assertIn("did you mean one of these?", output)
        self.assertIn("controller", output)
        self.assertIn("strata --help", output)

    def testFancyRendering(self):
        console = _capture()
        with mock.patch.object(faults, "console", console):
            with self.assertRaises(SystemExit):
                trigger(PrivilegedUserError(
                    "refusing to run with root privileges", title="privileged user", code=FaultCode.PRIVILEGED_USER
                ), shell=True, fancy=True, colorful=False, prog="strata")
        output = console.file.getvalue()
        self.assertIn("╭", output)
        self.assertIn("refusing to run with root privileges", output)
        self.assertNotIn("did you mean", output)

    def testRejectsNonTriggerables(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))

    def testHierarchy(self):
        self.assertTrue(issubclass(PrivilegedUserError, PreconditionError))
        self.assertTrue(issubclass(UnknownCommandError, StrataException))


if __name__ == "__main__":
    unittest.main()
