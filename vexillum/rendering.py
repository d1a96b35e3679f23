"""
Vexillum help rendering.

What this module provides
- palette(colorful): the styler/text pair shared by flag lines and the usage heading.
- render_help(registry, program): pure function of registry state producing the
  usage text (rich Text) with one aligned line per declared flag.
- show_help(registry, program): print the rendered usage to the registry's
  stdout console (wrapped in a panel when the registry is fancy).

Layout
    Usage: prog [options]
      -v  --verbose  Be chatty.
          --count    How many.  Default: 3

- Flags appear in declaration order (duplicates included).
- The long-name column is padded to the registry-wide longest long name plus a
  two-space gutter.

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed and the text is plain.
"""
import os.path
import sys
from collections import defaultdict

from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

PALETTE = {
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "short-name": "bold #22C55E",
    "long-name": "bold #00E6FF",
    "description": "#9CA3AF",
    "default-label": "dim",
    "default-value": "bold #FFD600",
    "panel-title": "bold #FF4D94",
}


def palette(colorful, /):
    """
    Build the (styler, text) helpers for one rendering pass.

    - styler(name) resolves a palette entry, or "" when colorful is False.
    - text(fragment, style) normalizes a fragment to rich Text, dropping the
      style when colorful is False.
    """
    styles = defaultdict(str, PALETTE | getattr(sys.modules["__main__"], "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), style if colorful else "")

    return styler, text


def program_name(argv0, /):
    """
    Display name of a program: the base name of its invocation path.
    """
    return os.path.basename(str(argv0).rstrip("/\\")) or str(argv0)


def render_help(registry, program=Unset, /):
    """
    Render usage text for every flag declared in a registry.

    Parameters
    - registry: the Registry whose declaration order and width drive the layout.
    - program: display name; defaults to registry.prog.

    Returns
    - rich.text.Text; use .plain for the unstyled string.
    """
    styler, text = palette(registry.colorful)
    program = coalesce(program, registry.prog)

    usage = Text()
    usage.append(text("Usage", styler("usage-label"))).append(": ")
    usage.append(text(program, styler("program-name")))

    flags = registry.declaration_order
    if not flags:
        return usage

    usage.append(" [options]")
    width = registry.longest_long_name_width()
    for flag in flags:
        usage.append("\n").append(flag.render(width, colorful=registry.colorful))
    return usage


def show_help(registry, program=Unset, /):
    """
    Print the usage text to the registry's stdout console.
    """
    styler, text = palette(registry.colorful)
    renderable = render_help(registry, program)

    if registry.fancy:
        renderable = Panel(
            renderable,
            title=text("[ %s HELP ]" % coalesce(program, registry.prog).upper(), styler("panel-title")),
            title_align="left",
        )

    registry.stdout.print(renderable, soft_wrap=True, highlight=False)


__all__ = (
    "palette",
    "program_name",
    "render_help",
    "show_help",
)
