"""Regex filter chains for harvest policy.

A filter chain is an ordered list of compiled regular expressions of one
policy kind:

- IgnoreFilterChain matches whole URLs that must be excluded.
- CleanFilterChain matches query parameter names that must be stripped.

Matching is existential; insertion order only decides which rule is
reported as the reason. Chains are built once and never mutated.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, ClassVar, Iterable, Iterator

from lectiod.core.constants import FilterKind


logger = logging.getLogger(__name__)

# Receives configuration error messages, e.g. ConfigurationBundle.record_error
ErrorSink = Callable[[str], None]


@dataclass(frozen=True)
class RegexRule:
    """Compiled pattern plus the source text it was compiled from."""
    pattern: str
    compiled: re.Pattern

    @classmethod
    def compile(cls, pattern: str) -> "RegexRule":
        """Compile a pattern.

        Raises:
            re.error: If the pattern is not a valid regular expression
        """
        return cls(pattern=pattern, compiled=re.compile(pattern))

    def matches(self, text: str) -> bool:
        """Check whether the pattern occurs anywhere in text."""
        return self.compiled.search(text) is not None


class FilterChain:
    """Ordered, immutable sequence of regex rules of a single kind."""

    kind: ClassVar[FilterKind]
    reason_label: ClassVar[str]

    def __init__(self, rules: Iterable[RegexRule] = ()):
        self._rules: tuple[RegexRule, ...] = tuple(rules)

    @classmethod
    def build(cls, patterns: Iterable[str], sink: ErrorSink) -> "FilterChain":
        """Compile patterns in order into a chain.

        A pattern that fails to compile is reported to sink and skipped;
        the remaining patterns are still compiled. Empty patterns are
        skipped silently.

        Args:
            patterns: Regex source strings
            sink: Receives one message per pattern that failed to compile

        Returns:
            Chain containing only the compiled rules, in original order
        """
        rules: list[RegexRule] = []
        for pattern in patterns:
            if not pattern:
                continue
            try:
                rules.append(RegexRule.compile(pattern))
            except re.error as e:
                message = f"Error adding regexp '{pattern}' to {cls.kind.value} list: {e}"
                logger.warning(message)
                sink(message)
        return cls(rules)

    def matches(self, candidate: str) -> tuple[bool, str]:
        """Scan rules in order and report the first match.

        Args:
            candidate: URL or parameter name to test

        Returns:
            Tuple of (matched, reason); reason is empty when nothing matched
        """
        for rule in self._rules:
            if rule.matches(candidate):
                return True, f"{self.reason_label} `{rule.pattern}`"
        return False, ""

    @property
    def patterns(self) -> tuple[str, ...]:
        """Source text of the compiled rules."""
        return tuple(rule.pattern for rule in self._rules)

    def __iter__(self) -> Iterator[RegexRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.patterns)!r})"


class IgnoreFilterChain(FilterChain):
    """Rules matching URLs that must be excluded from harvesting."""

    kind = FilterKind.IGNORE
    reason_label = "Matched Ignore Rule"

    def is_ignored(self, url: str) -> tuple[bool, str]:
        """IgnorePolicy hook consulted by harvesting engines."""
        return self.matches(url)


class CleanFilterChain(FilterChain):
    """Rules matching query parameter names that must be stripped."""

    kind = FilterKind.CLEAN
    reason_label = "Matched cleaner rule"

    def should_clean_any_url(self) -> bool:
        """Every discovered URL gets a cleaning attempt.

        The chain only selects which parameters are removed; it never
        decides whether a URL is cleaned at all.
        """
        return True

    def should_clean(self, url: str) -> bool:
        """CleanPolicy hook: per-URL form of should_clean_any_url."""
        return self.should_clean_any_url()

    def should_strip_param(self, param_name: str) -> tuple[bool, str]:
        """CleanPolicy hook: whether a query parameter must be removed."""
        return self.matches(param_name)
