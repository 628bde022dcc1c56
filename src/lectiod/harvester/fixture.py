"""Replay harvesting engine.

Returns a fixed list of candidates regardless of input text. Used to
replay recorded harvests and as a deterministic engine in tests.

Fixture file format (YAML):

    candidates:
      - original_url: https://example.com/?utm_source=x
        cleaned: true
        final_url: https://example.com/?utm_source=x
        resolved_url: https://example.com/?utm_source=x
        cleaned_url: https://example.com/
      - original_url: not a url
        url_valid: false
"""

import dataclasses
from pathlib import Path
from typing import Iterable, Sequence

import yaml

from lectiod.core.exceptions import ConfigError
from lectiod.harvester.base import Candidate, CleanPolicy, HarvestedCandidate, IgnorePolicy


_CANDIDATE_FIELDS = {f.name for f in dataclasses.fields(HarvestedCandidate)}
_BOOL_FIELDS = {"url_valid", "destination_valid", "ignored", "html_redirect", "cleaned"}
_OPTIONAL_FIELDS = {"final_url", "resolved_url", "cleaned_url"}


def candidate_from_dict(data: dict) -> HarvestedCandidate:
    """Build a HarvestedCandidate from a fixture entry.

    Raises:
        ConfigError: If the entry is malformed
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Candidate entry must be a mapping, got {data!r}")
    if "original_url" not in data:
        raise ConfigError("Candidate entry is missing 'original_url'")
    unknown = set(data) - _CANDIDATE_FIELDS
    if unknown:
        raise ConfigError(f"Unknown candidate field(s): {', '.join(sorted(unknown))}")
    for key, value in data.items():
        if key in _BOOL_FIELDS:
            if not isinstance(value, bool):
                raise ConfigError(f"Candidate field '{key}' must be a boolean, got {value!r}")
        elif not isinstance(value, str) and not (value is None and key in _OPTIONAL_FIELDS):
            raise ConfigError(f"Candidate field '{key}' must be a string, got {value!r}")
    return HarvestedCandidate(**data)


class FixtureHarvester:
    """HarvestingEngine that replays a fixed candidate sequence."""

    def __init__(self, candidates: Iterable[Candidate]):
        self.candidates: tuple[Candidate, ...] = tuple(candidates)
        self.calls = 0

    @classmethod
    def from_file(cls, path: Path | str) -> "FixtureHarvester":
        """Load candidates from a YAML fixture file.

        Raises:
            ConfigError: If the file cannot be read or is malformed
        """
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse candidates file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read candidates file {path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("candidates"), list):
            raise ConfigError(f"Candidates file {path} must contain a 'candidates' list")
        return cls(candidate_from_dict(entry) for entry in data["candidates"])

    async def harvest(
        self,
        text: str,
        ignore_policy: IgnorePolicy,
        clean_policy: CleanPolicy,
        follow_html_redirects: bool,
    ) -> Sequence[Candidate]:
        self.calls += 1
        return list(self.candidates)
