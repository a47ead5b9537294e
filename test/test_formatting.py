"""
Help and version text tests (exact layout).

Conventions
- Test method names follow CamelCase per project convention.
- Expected texts are spelled out in full: column alignment is part of the contract.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argotype import command, group


def noop(*args):
    return None


class TestCommandHelp(TestCase):

    def setUp(self):
        self.copy = (
            command("Copy a file", version="1.2.3")
            .positional("source", "the source file")
            .positional("destination", "the destination", required=False)
            .option(None, "mode", "file mode", "scalar")
            .option("f", "force", "overwrite existing files")
            .build(noop)
        )

    def testFullLayout(self):
        self.assertEqual(
            self.copy.help("copy", "app copy"),
            "copy version 1.2.3\n"
            "\n"
            "Copy a file\n"
            "\n"
            "Usage: app copy [options] <source> [destination]\n"
            "\n"
            "Positional parameters:\n"
            "  <source>       the source file\n"
            "  [destination]  the destination\n"
            "\n"
            "Options:\n"
            "  -f, --force         overwrite existing files\n"
            "      --mode <value>  file mode",
        )

    def testFullnameDefaultsToName(self):
        self.assertIn("Usage: copy [options]", self.copy.help("copy"))

    def testMinimalCommand(self):
        spec = command().build(noop)
        self.assertEqual(spec.help("tool"), "tool\n\nUsage: tool")

    def testExtraInUsageAndListing(self):
        spec = command().positional("first").extra("rest", "everything else").build(noop)
        self.assertEqual(
            spec.help("tool"),
            "tool\n"
            "\n"
            "Usage: tool <first> [...rest]\n"
            "\n"
            "Positional parameters:\n"
            "  <first>\n"
            "  [...rest]  everything else",
        )

    def testNameOverride(self):
        spec = command("Tool", name="renamed", version="0.1").build(noop)
        self.assertTrue(spec.help("tool").startswith("renamed version 0.1\n"))
        self.assertEqual(spec.version("tool"), "renamed version 0.1")

    def testVersionAbsent(self):
        self.assertIsNone(command().build(noop).version("tool"))

    def testHelpIsDeterministic(self):
        self.assertEqual(self.copy.help("copy"), self.copy.help("copy"))


class TestGroupHelp(TestCase):

    def testGroupLayout(self):
        copy = command("Copy a file").build(noop)
        move = command("Move a file").build(noop)
        app = (
            group("Sample app", version="2.0")
            .option("C", "cwd", "change directory", "scalar")
            .command("move", move)
            .command("copy", copy)
            .build()
        )
        self.assertEqual(
            app.help("app"),
            "app version 2.0\n"
            "\n"
            "Sample app\n"
            "\n"
            "Usage: app [options] <command> [...args]\n"
            "\n"
            "Options:\n"
            "  -C, --cwd <value>  change directory\n"
            "\n"
            "Commands:\n"
            "  move  Move a file\n"
            "  copy  Copy a file",
        )

    def testGroupWithoutOptions(self):
        app = group().command("go", command("Go").build(noop)).build()
        self.assertEqual(app.help("app"), "app\n\nUsage: app <command> [...args]\n\nCommands:\n  go  Go")

    def testGroupVersion(self):
        self.assertEqual(group(version="3").build().version("app"), "app version 3")


if __name__ == "__main__":
    unittest.main()
