"""
Rendering module behavioral tests (usage text, alignment, panels, palette).

Scope
- Validate the exact usage layout: heading, declaration order, padding.
- Validate that duplicates and illegal names still show up in help.
- Validate show_help() output (plain and fancy) and palette overrides.

Conventions
- Test method names follow CamelCase per project convention.
- Layout assertions compare the plain text of the rendered rich Text.
"""

from __future__ import annotations

import io
import sys
import unittest
from unittest import TestCase, mock

from vexillum import Registry
from vexillum.rendering import PALETTE, palette, program_name, render_help


def _registry(**options):
    options.setdefault("help", False)
    return Registry("prog", stdout=io.StringIO(), stderr=io.StringIO(), **options)


class TestRenderHelp(TestCase):
    """Behavioral tests for render_help() layout."""

    def testNoFlags(self):
        self.assertEqual(render_help(_registry()).plain, "Usage: prog")

    def testDeclarationOrderAndPadding(self):
        registry = _registry()
        registry.define_bool("verbose", "v", False, "Be chatty.")
        registry.define_int("count", "c", 0, "How many.")
        registry.define_string("output", "o", "out.txt", "Where.")
        self.assertEqual(registry.render_help().plain, "\n".join((
            "Usage: prog [options]",
            "  -v  --verbose  Be chatty.",
            "  -c  --count    How many.",
            "  -o  --output   Where.  Default: 'out.txt'",
        )))

    def testHelpFlagLeadsTheListing(self):
        registry = _registry(help=True)
        registry.define_bool("v", "v", False, "Be chatty.")
        self.assertEqual(registry.render_help().plain, "\n".join((
            "Usage: prog [options]",
            "      --help  Display flags for this command.",
            "  -v  --v     Be chatty.",
        )))

    def testDuplicatesAreBothListed(self):
        registry = _registry()
        registry.define_bool("verbose", "v")
        registry.define_bool("version", "v")
        plain = registry.render_help().plain
        self.assertEqual(plain.count("--verbose"), 1)
        self.assertEqual(plain.count("--version"), 1)

    def testIllegalLongNameIsListedAndWidensTheColumn(self):
        registry = _registry(quiet=True)
        registry.define_bool("a", None, False, "A.")
        registry.define_bool("bad name", None, False, "Bad.")
        self.assertEqual(registry.render_help().plain, "\n".join((
            "Usage: prog [options]",
            "      --a         A.",
            "      --bad name  Bad.",
        )))

    def testExplicitProgram(self):
        registry = _registry()
        self.assertEqual(registry.render_help("other").plain, "Usage: other")

    def testColorfulMatchesPlainLayout(self):
        plain, colorful = _registry(), _registry(colorful=True)
        for registry in (plain, colorful):
            registry.define_bool("verbose", "v", False, "Be chatty.")
            registry.define_int("count", "c", 3, "How many.")
        self.assertEqual(colorful.render_help().plain, plain.render_help().plain)
        self.assertTrue(colorful.render_help().spans)


class TestShowHelp(TestCase):
    """Behavioral tests for show_help() output."""

    def testPrintsToStdout(self):
        registry = _registry()
        registry.define_bool("verbose", "v", False, "Be chatty.")
        registry.show_help()
        self.assertEqual(
            registry.stdout.file.getvalue(),
            "Usage: prog [options]\n  -v  --verbose  Be chatty.\n"
        )
        self.assertEqual(registry.stderr.file.getvalue(), "")

    def testFancyPanel(self):
        registry = _registry(fancy=True)
        registry.define_bool("verbose", "v", False, "Be chatty.")
        registry.show_help()
        output = registry.stdout.file.getvalue()
        self.assertIn("[ PROG HELP ]", output)
        self.assertIn("--verbose", output)


class TestPalette(TestCase):
    """Behavioral tests for palette() helpers."""

    def testColorless(self):
        styler, text = palette(False)
        self.assertEqual(styler("long-name"), "")
        self.assertFalse(text("x", "bold").spans)
        self.assertEqual(text("x", "bold").style, "")

    def testColorful(self):
        styler, text = palette(True)
        self.assertEqual(styler("long-name"), PALETTE["long-name"])
        self.assertEqual(styler("no-such-entry"), "")
        self.assertEqual(text("x", "bold").style, "bold")

    def testHostOverrides(self):
        with mock.patch.object(sys.modules["__main__"], "__styles__", {"long-name": "red"}, create=True):
            styler, _ = palette(True)
        self.assertEqual(styler("long-name"), "red")
        self.assertEqual(styler("short-name"), PALETTE["short-name"])


class TestProgramName(TestCase):
    """Behavioral tests for program_name()."""

    def testBaseName(self):
        self.assertEqual(program_name("/usr/local/bin/tool"), "tool")
        self.assertEqual(program_name("tool"), "tool")

    def testTrailingSeparator(self):
        self.assertEqual(program_name("/opt/tool/"), "tool")


if __name__ == "__main__":
    unittest.main()
