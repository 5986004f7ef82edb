"""Success predicate applied to every dispatch outcome."""

from dataclasses import dataclass
from typing import Optional

from webbrute.core.models import DispatchOutcome


@dataclass(frozen=True)
class SuccessCriteria:
    """
    All configured checks must hold for SUCCESS; a check left as None is
    skipped. Checks run status -> required text -> forbidden text and stop
    at the first one that fails.
    """
    status: Optional[int] = None
    body: Optional[str] = None
    not_body: Optional[str] = None

    @property
    def configured(self) -> bool:
        return any(c is not None for c in (self.status, self.body, self.not_body))

    def check_response(self, outcome: DispatchOutcome) -> bool:
        if outcome.failed:
            return False

        if self.status is not None and outcome.status_code != self.status:
            return False

        if self.body is None and self.not_body is None:
            return True

        text = outcome.text
        if self.body is not None and self.body not in text:
            return False
        if self.not_body is not None and self.not_body in text:
            return False
        return True

    def describe(self) -> str:
        parts = []
        if self.status is not None:
            parts.append(f"status == {self.status}")
        if self.body is not None:
            parts.append(f"body contains {self.body!r}")
        if self.not_body is not None:
            parts.append(f"body lacks {self.not_body!r}")
        return " and ".join(parts) or "any response"
