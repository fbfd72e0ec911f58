# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Strings with a designated task-index substitution point.

`IndexedTemplate` splits a string (a log path or a command token) around
occurrences of an array placeholder. An occurrence only counts when it is not
glued to other letters or digits, so `feats.JOB.ark` and `split/JOB/utt2spk`
contain the placeholder `JOB` while `JOBS` or `myJOB` do not.
"""

import re
from dataclasses import dataclass
from typing import Self


@dataclass(frozen=True)
class IndexedTemplate:
    """
    Immutable string template with zero or more occurrences of one placeholder.

    The literal text between the occurrences is stored in `segments`, so
    a template with `k` occurrences has `k + 1` segments.
    """

    # Literal pieces of the text surrounding the placeholder occurrences.
    segments: tuple[str, ...]

    # Name of the placeholder; None for templates without any substitution point.
    placeholder: str | None = None

    @classmethod
    def fromStr(cls, text: str, placeholder: str | None) -> Self:
        """
        Split `text` around the standalone occurrences of `placeholder`.

        Args:
            text (str): The text to parse.
            placeholder (str | None): Name of the placeholder. If None,
                the whole text is a single literal segment.

        Returns:
            IndexedTemplate: The parsed template.
        """
        if not placeholder:
            return cls((text,), None)

        pattern = rf"(?<![A-Za-z0-9]){re.escape(placeholder)}(?![A-Za-z0-9])"
        return cls(tuple(re.split(pattern, text)), placeholder)

    def hasPlaceholder(self) -> bool:
        """Return True if the template contains at least one substitution point."""
        return len(self.segments) > 1

    def render(self, value: str) -> str:
        """
        Substitute every placeholder occurrence with `value`.

        Args:
            value (str): Text to put in place of the placeholder, e.g. a task
                index, a shell variable reference, or a glob `*`.

        Returns:
            str: The rendered text.
        """
        return value.join(self.segments)

    def collapse(self) -> str:
        """
        Remove the placeholder occurrences, together with a single dot
        directly preceding each of them.

        Used to derive index-free names (`foo.JOB.log` -> `foo.log`).
        """
        pieces = [
            segment[:-1] if segment.endswith(".") else segment
            for segment in self.segments[:-1]
        ]
        return "".join(pieces) + self.segments[-1]

    def __str__(self) -> str:
        return self.render(self.placeholder or "")
