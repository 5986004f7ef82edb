"""Shared data models for the brute forcer."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

import httpx


class Verdict(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


@dataclass(frozen=True)
class CandidateRequest:
    """One fully materialized request for a single wordlist entry."""
    word: str
    method: str
    url: httpx.URL
    headers: Mapping[str, str]
    body: bytes = b""

    def __post_init__(self):
        # read-only view so retries and lanes never see each other's edits
        object.__setattr__(self, "headers",
                           MappingProxyType(dict(self.headers)))


@dataclass
class DispatchOutcome:
    """What a lane got back for one CandidateRequest.

    Exactly one of (status_code, error) is meaningful: a received response
    of any status, or the last transport error after retries ran out.
    """
    word: str
    status_code: Optional[int] = None
    headers: dict = field(default_factory=dict)
    body: bytes = b""
    error: Optional[Exception] = None
    attempts: int = 1

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def __str__(self):
        if self.failed:
            return (f"{self.word!r} — transport error after "
                    f"{self.attempts} attempt(s): {self.error}")
        return (f"{self.word!r} — HTTP {self.status_code} "
                f"({len(self.body)} bytes)")


@dataclass(frozen=True)
class VerdictRecord:
    """Terminal artifact: an entry and its classification."""
    word: str
    verdict: Verdict

    @property
    def success(self) -> bool:
        return self.verdict is Verdict.SUCCESS
