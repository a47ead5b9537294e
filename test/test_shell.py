"""
Shell adapter tests (exit statuses and where the text goes).

Conventions
- Test method names follow CamelCase per project convention.
- stdout/stderr are redirected; rich consoles resolve the stream when printing.
"""

from __future__ import annotations

import contextlib
import io
import unittest
from unittest import TestCase

from argotype import command, group, main, handle_help, handle_version, handle_help_and_version


class TestMain(TestCase):

    def setUp(self):
        self.tool = (
            command("Tool", version="1.0", enable_help=True, enable_version=True)
            .positional("input")
            .build(lambda positionals, options, context: positionals[0] * 2)
        )

    def capture(self, unit, args):
        stdout, stderr = io.StringIO(), io.StringIO()
        code = None
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            try:
                result = main(unit, None, "tool", args, colorful=False)
            except SystemExit as exit:
                code, result = exit.code, None
        return result, code, stdout.getvalue(), stderr.getvalue()

    def testSuccessReturnsResult(self):
        result, code, stdout, stderr = self.capture(self.tool, ["ab"])
        self.assertEqual(result, "abab")
        self.assertIsNone(code)
        self.assertEqual(stdout, "")

    def testHelpExitsZero(self):
        _, code, stdout, stderr = self.capture(self.tool, ["--help"])
        self.assertEqual(code, 0)
        self.assertIn("Usage: tool [options] <input>", stdout)
        self.assertEqual(stderr, "")

    def testVersionExitsZero(self):
        _, code, stdout, _ = self.capture(self.tool, ["-v"])
        self.assertEqual(code, 0)
        self.assertEqual(stdout.strip(), "tool version 1.0")

    def testErrorExitsOne(self):
        _, code, stdout, stderr = self.capture(self.tool, [])
        self.assertEqual(code, 1)
        self.assertEqual(stdout, "")
        self.assertIn("required positional parameters not given", stderr)
        self.assertIn("Usage: tool [options] <input>", stderr)

    def testGroupWithoutArgumentsPrintsHelp(self):
        app = group("App").command("tool", self.tool).build()
        _, code, stdout, _ = self.capture(app, [])
        self.assertEqual(code, 0)
        self.assertIn("Commands:", stdout)


class TestHandlers(TestCase):

    def setUp(self):
        seen = []
        self.tool = (
            command("Tool", version="3.1")
            .option("h", "help", "show help")
            .option("V", "version", "show version")
            .build(lambda positionals, options, context: seen.append((options, context)))
        )
        self.tool.run(["-h", "-V"], None, "tool")
        self.options, self.context = seen[0]
        self.tool.run([], None, "tool")
        self.empty = seen[1][0]

    def call(self, handler, options):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            try:
                handler(options, self.context)
            except SystemExit as exit:
                return exit.code, stdout.getvalue()
        return None, stdout.getvalue()

    def testHandleHelp(self):
        code, stdout = self.call(handle_help, self.options)
        self.assertEqual(code, 0)
        self.assertIn("Usage: tool [options]", stdout)

    def testHandleVersion(self):
        code, stdout = self.call(handle_version, self.options)
        self.assertEqual(code, 0)
        self.assertEqual(stdout.strip(), "tool version 3.1")

    def testHandleBothPrefersVersion(self):
        code, stdout = self.call(handle_help_and_version, self.options)
        self.assertEqual(code, 0)
        self.assertNotIn("Usage:", stdout)

    def testHandlersIgnoreAbsentOptions(self):
        self.assertEqual(self.call(handle_help_and_version, self.empty), (None, ""))


if __name__ == "__main__":
    unittest.main()
