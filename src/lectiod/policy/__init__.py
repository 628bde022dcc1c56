"""Harvest policy filter chains.

- RegexRule: compiled pattern with its source text
- IgnoreFilterChain: excludes whole URLs
- CleanFilterChain: selects query parameters to strip
"""

from lectiod.policy.filters import (
    CleanFilterChain,
    ErrorSink,
    FilterChain,
    IgnoreFilterChain,
    RegexRule,
)

__all__ = [
    "CleanFilterChain",
    "ErrorSink",
    "FilterChain",
    "IgnoreFilterChain",
    "RegexRule",
]
