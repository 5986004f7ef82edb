"""Error taxonomy for webbrute.

Every fatal condition raised before or during a run derives from
BruteError and carries a searchable code plus a details dict naming the
input that caused it (template, wordlist, target, rate).

Transport failures are NOT exceptions here: they end up as FAILURE
verdicts once retries run out (see core/engine.py).
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    # Configuration
    CONFIG_INVALID_RATE = "CONFIG_001"
    CONFIG_INVALID_TARGET = "CONFIG_002"
    CONFIG_INVALID_TIMEOUT = "CONFIG_003"
    CONFIG_UNREADABLE_INPUT = "CONFIG_004"

    # Templates
    TEMPLATE_EMPTY = "TEMPLATE_001"
    TEMPLATE_BAD_REQUEST_LINE = "TEMPLATE_002"
    TEMPLATE_BAD_HEADER = "TEMPLATE_003"
    TEMPLATE_BAD_CONTENT_LENGTH = "TEMPLATE_004"
    TEMPLATE_SHORT_BODY = "TEMPLATE_005"
    TEMPLATE_BAD_TARGET = "TEMPLATE_006"


class BruteError(Exception):
    def __init__(self, code: ErrorCode, message: str,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.code.name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if not self.details:
            return f"[{self.code.value}] {self.message}"
        extra = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"[{self.code.value}] {self.message} ({extra})"


class ConfigurationError(BruteError):
    """Caller configuration is unusable; the run never starts."""


class TemplateParseError(ConfigurationError):
    """Raw request bytes do not parse as an HTTP/1.x request."""


class TemplateSubstitutionError(TemplateParseError):
    """The template parsed on its own but not after substituting an entry."""

    def __init__(self, cause: TemplateParseError, word: str, line: int):
        details = dict(cause.details)
        details.update({"word": word, "line": line})
        super().__init__(cause.code,
                         f"wordlist entry breaks the request: {cause.message}",
                         details)
        self.word = word
        self.line = line
