# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Self

from qdispatch_lib.core.error import QDConfigError
from qdispatch_lib.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class QueueConfig:
    """
    Site-specific translation of abstract options into scheduler flags.

    The queue config file is line based. Everything after `#` is a comment.
    Recognized lines are:

        standard_opts <flags>       flags added to every submission
        default <var>=<value>       value used when `--var` is not given
        <var>=* <template>          any value of `--var`; `$0` is replaced by the value
        <var>=<value> <template>    this exact value of `--var`

    Exact rules take precedence over wildcard rules.
    """

    # Where the config was read from.
    source: str

    # Flags added to every submission, in the order of the file.
    standard_opts: tuple[str, ...] = ()

    # Default values of abstract options.
    defaults: Mapping[str, str] = field(default_factory=dict)

    # Templates for specific (option, value) pairs.
    exact_rules: Mapping[tuple[str, str], str] = field(default_factory=dict)

    # Templates applied to any value of an option.
    wildcard_rules: Mapping[str, str] = field(default_factory=dict)

    # placeholder for the value of the option inside a template
    PLACEHOLDER = "$0"

    _COMMENT = re.compile(r"\s*#.*")
    _STANDARD_OPTS = re.compile(r"^standard_opts\s+(.+)$")
    _DEFAULT = re.compile(r"^default\s+([^=\s]+)=(\S+)\s*$")
    _WILDCARD = re.compile(r"^([^=\s]+)=\*\s+(.+)$")
    _EXACT = re.compile(r"^([^=\s]+)=(\S+)\s+(.+)$")

    def __post_init__(self):
        object.__setattr__(self, "standard_opts", tuple(self.standard_opts))
        for name in ("defaults", "exact_rules", "wildcard_rules"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    @classmethod
    def fromFile(cls, path: Path) -> Self:
        """
        Read and parse a queue config file.

        Args:
            path (Path): Path to the file.

        Returns:
            QueueConfig: The parsed config.

        Raises:
            OSError: If the file cannot be opened.
            QDConfigError: If the file contains an unrecognized line.
        """
        logger.debug(f"Reading queue config from '{path}'.")
        return cls.fromText(path.read_text(), str(path))

    @classmethod
    def fromText(cls, text: str, source: str = "<string>") -> Self:
        """
        Parse the content of a queue config file.

        Raises:
            QDConfigError: If the text contains an unrecognized line or
                a wildcard rule without the `$0` placeholder.
        """
        standard_opts = []
        defaults = {}
        exact_rules = {}
        wildcard_rules = {}

        for lineno, raw in enumerate(text.splitlines(), start=1):
            line = cls._COMMENT.sub("", raw).strip()
            if not line:
                continue

            if match := cls._STANDARD_OPTS.match(line):
                standard_opts.append(match.group(1).strip())
            elif match := cls._DEFAULT.match(line):
                defaults[match.group(1)] = match.group(2)
            elif match := cls._WILDCARD.match(line):
                var, template = match.group(1), match.group(2).strip()
                if cls.PLACEHOLDER not in template:
                    raise QDConfigError(
                        f"Unable to parse line {lineno} of queue config '{source}': '{raw.strip()}'. "
                        f"Rule for '{var}=*' must use '{cls.PLACEHOLDER}'."
                    )
                wildcard_rules[var] = template
            elif match := cls._EXACT.match(line):
                exact_rules[(match.group(1), match.group(2))] = match.group(3).strip()
            else:
                raise QDConfigError(
                    f"Unable to parse line {lineno} of queue config '{source}': '{raw.strip()}'."
                )

        return cls(
            source=source,
            standard_opts=standard_opts,
            defaults=defaults,
            exact_rules=exact_rules,
            wildcard_rules=wildcard_rules,
        )

    def translate(self, name: str, value: str) -> str:
        """
        Translate an abstract option into a flag fragment.

        Args:
            name (str): Name of the abstract option, e.g. `mem`.
            value (str): Value of the option, e.g. `4G`.

        Returns:
            str: The flag fragment (possibly empty).

        Raises:
            QDConfigError: If the option is not described in the config.
        """
        if (template := self.exact_rules.get((name, value))) is None:
            template = self.wildcard_rules.get(name)

        if template is None:
            raise QDConfigError(
                f"Option '--{name.replace('_', '-')} {value}' is not described in queue config '{self.source}'."
            )

        return template.replace(QueueConfig.PLACEHOLDER, value)
