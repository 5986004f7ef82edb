"""Run configuration, built from the command line."""

from dataclasses import dataclass
from typing import Optional

from webbrute.checkers.criteria import SuccessCriteria
from webbrute.core.errors import ConfigurationError, ErrorCode
from webbrute.parsers.request import parse_base_target

DEFAULT_RATE = 10
DEFAULT_TIMEOUT = 10.0


@dataclass
class RunConfig:
    raw_request: str
    target: str
    wordlist: str
    rate: int = DEFAULT_RATE
    status: Optional[int] = None
    body: Optional[str] = None
    not_body: Optional[str] = None
    proxy: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    verbose: int = 1

    @classmethod
    def from_args(cls, args) -> "RunConfig":
        return cls(
            raw_request=args.raw_request,
            target=args.target,
            wordlist=args.wordlist,
            rate=args.rate,
            status=args.status,
            body=args.body,
            not_body=args.not_body,
            proxy=args.proxy,
            timeout=args.timeout,
            verbose=0 if args.quiet else args.verbose,
        ).validate()

    def validate(self) -> "RunConfig":
        if self.rate <= 0:
            raise ConfigurationError(ErrorCode.CONFIG_INVALID_RATE,
                                     "rate must be a positive integer",
                                     {"rate": self.rate})
        if self.timeout <= 0:
            raise ConfigurationError(ErrorCode.CONFIG_INVALID_TIMEOUT,
                                     "timeout must be positive",
                                     {"timeout": self.timeout})
        parse_base_target(self.target)
        return self

    @property
    def criteria(self) -> SuccessCriteria:
        return SuccessCriteria(status=self.status, body=self.body,
                               not_body=self.not_body)
