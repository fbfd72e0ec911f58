# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Help output of the qdispatch command.

The description of qdispatch consists of argument tables and example
command lines, so it is printed line by line instead of being re-wrapped
by click. Options are listed one per line, each followed by its indented
description.
"""

import click
from click import HelpFormatter
from click_help_colors import HelpColorsCommand


class DispatchHelpFormatter(HelpFormatter):
    """Formatter printing colored headings and verbatim description lines."""

    # indentation of option descriptions
    DESCRIPTION_INDENT = 6

    def __init__(self, width=None, headers_color="white", options_color="white"):
        super().__init__(width=width)
        self._headers_color = headers_color
        self._options_color = options_color

    def _styleHeading(self, text: str) -> str:
        return click.style(text, fg=self._headers_color, bold=True)

    def write_heading(self, heading):
        self.write(self._styleHeading(heading) + "\n")

    def write_usage(self, prog, args="", prefix=None):
        parts = [self._styleHeading(prefix or "Usage:"), prog]
        if args:
            parts.append(args)
        self.write(" ".join(parts) + "\n")

    def write_text(self, text):
        indent = " " * self.current_indent
        for line in text.splitlines():
            self.write(f"{indent}{line}".rstrip() + "\n")

    def write_dl(self, rows, col_max=30, col_spacing=2):
        for term, description in rows:
            self.write("  " + click.style(term, fg=self._options_color, bold=True) + "\n")
            for line in filter(str.strip, description.splitlines()):
                self.write(" " * self.DESCRIPTION_INDENT + line + "\n")
            self.write("\n")


class DispatchCommand(HelpColorsCommand):
    """Click command printing its help using `DispatchHelpFormatter`."""

    def get_help(self, ctx):
        formatter = DispatchHelpFormatter(
            width=ctx.terminal_width,
            headers_color=getattr(self, "help_headers_color", None) or "white",
            options_color=getattr(self, "help_options_color", None) or "white",
        )
        self.format_help(ctx, formatter)
        return formatter.getvalue()
