import asyncio
from typing import Callable, List, Optional

from webbrute.checkers.criteria import SuccessCriteria
from webbrute.core.models import DispatchOutcome, Verdict, VerdictRecord


class Collector:
    """
    Turns dispatch outcomes into verdicts.

    Consumes exactly `expected` outcomes from the queue and stops. Verdicts
    come out in completion order; each one carries its own word, so nothing
    is reordered.
    """

    def __init__(self, criteria: SuccessCriteria, expected: int, logger=None,
                 on_verdict: Optional[Callable[[VerdictRecord], None]] = None):
        self.criteria = criteria
        self.expected = expected
        self.logger = logger
        self.on_verdict = on_verdict
        self.verdicts: List[VerdictRecord] = []

    def classify(self, outcome: DispatchOutcome) -> VerdictRecord:
        if outcome.failed:
            if self.logger:
                self.logger.warn(f"Transport failure: {outcome}")
            return VerdictRecord(outcome.word, Verdict.FAILURE)

        ok = self.criteria.check_response(outcome)
        if self.logger and self.logger.verbose >= 2:
            self.logger.debug(f"← {outcome}")
        return VerdictRecord(outcome.word,
                             Verdict.SUCCESS if ok else Verdict.FAILURE)

    def emit(self, record: VerdictRecord) -> None:
        self.verdicts.append(record)
        if self.on_verdict:
            self.on_verdict(record)
        elif self.logger:
            self.logger.verdict(record.word, record.verdict)

    async def consume(self, outcomes: asyncio.Queue) -> List[VerdictRecord]:
        for _ in range(self.expected):
            outcome = await outcomes.get()
            self.emit(self.classify(outcome))
        return self.verdicts

    @property
    def successes(self) -> List[VerdictRecord]:
        return [v for v in self.verdicts if v.success]
