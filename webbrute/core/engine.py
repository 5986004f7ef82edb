import asyncio
from typing import Iterable, List, Optional, Union

import httpx

from webbrute.core.collector import Collector
from webbrute.core.models import CandidateRequest, DispatchOutcome, VerdictRecord
from webbrute.parsers.request import RequestTemplate, parse_base_target

# httpx frames the body itself
_STOP_HDRS = {"content-length", "transfer-encoding"}

MAX_RETRIES = 3
RETRY_DELAY = 1.0
LANE_INTERVAL = 1.0


class Engine:
    """
    Rate-limited lane pool.

    `rate` lanes pull CandidateRequests from a one-slot submission queue.
    Every lane waits at least `interval` seconds between the starts of its
    own dispatches, so the pool as a whole runs at roughly `rate` requests
    per second. Transport errors are retried `retries` times, `retry_delay`
    seconds apart; a received response of any status is final.
    """

    def __init__(self, rate: int = 10, proxy: str | None = None,
                 timeout: float = 10, logger=None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 retries: int = MAX_RETRIES, retry_delay: float = RETRY_DELAY,
                 interval: float = LANE_INTERVAL):
        self.rate = rate
        self.proxy = proxy
        self.timeout = timeout
        self.logger = logger
        self.transport = transport
        self.retries = retries
        self.retry_delay = retry_delay
        self.interval = interval

    def _client(self) -> httpx.AsyncClient:
        if self.transport is not None:
            return httpx.AsyncClient(transport=self.transport,
                                     follow_redirects=True, timeout=self.timeout)
        return httpx.AsyncClient(verify=False, proxy=self.proxy,
                                 follow_redirects=True, timeout=self.timeout)

    # ---------- single request ----------

    async def _send(self, client: httpx.AsyncClient,
                    candidate: CandidateRequest) -> httpx.Response:
        # fresh header list per attempt; the candidate itself is read-only
        headers = [(k.encode("ascii"), v.encode("utf-8"))
                   for k, v in candidate.headers.items()
                   if k.lower() not in _STOP_HDRS]
        return await client.request(candidate.method, candidate.url,
                                    headers=headers,
                                    content=candidate.body or None)

    async def execute(self, client: httpx.AsyncClient,
                      candidate: CandidateRequest) -> DispatchOutcome:
        error: Optional[Exception] = None
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            if attempt > 1:
                await asyncio.sleep(self.retry_delay)
            try:
                resp = await self._send(client, candidate)
            except httpx.RequestError as exc:
                error = exc
                if self.logger and self.logger.verbose >= 2:
                    self.logger.debug(
                        f"  {candidate.word!r} attempt {attempt}/{attempts} "
                        f"failed: {exc.__class__.__name__}: {exc}")
                continue
            return DispatchOutcome(
                word=candidate.word,
                status_code=resp.status_code,
                headers=dict(resp.headers.items()),
                body=resp.content,
                attempts=attempt,
            )
        return DispatchOutcome(word=candidate.word, error=error,
                               attempts=attempts)

    # ---------- tasks ----------

    async def _lane(self, lane_id: int, client: httpx.AsyncClient,
                    submissions: asyncio.Queue, outcomes: asyncio.Queue) -> None:
        loop = asyncio.get_running_loop()
        last_dispatch: Optional[float] = None
        while True:
            candidate = await submissions.get()
            if candidate is None:
                return
            if last_dispatch is not None:
                wait = self.interval - (loop.time() - last_dispatch)
                if wait > 0:
                    await asyncio.sleep(wait)
            last_dispatch = loop.time()
            if self.logger and self.logger.verbose >= 2:
                self.logger.debug(
                    f"[lane {lane_id}] → {candidate.method} {candidate.url}")
            await outcomes.put(await self.execute(client, candidate))

    async def _produce(self, template: RequestTemplate, words: List[str],
                       base_url: httpx.URL, submissions: asyncio.Queue) -> None:
        for word in words:
            await submissions.put(template.materialize(word, base_url))
        # one stop marker per lane
        for _ in range(self.rate):
            await submissions.put(None)

    @staticmethod
    async def _supervise(tasks: List[asyncio.Task]) -> None:
        pending = set(tasks)
        while pending:
            done, pending = await asyncio.wait(
                pending, return_when=asyncio.FIRST_EXCEPTION)
            for task in done:
                exc = task.exception()
                if exc is not None:
                    raise exc

    async def run(self, template: RequestTemplate, words: Iterable[str],
                  target: Union[str, httpx.URL],
                  collector: Collector) -> List[VerdictRecord]:
        base_url = parse_base_target(target)
        words = list(words)
        # a bad entry must abort before the first request goes out
        template.validate(words, base_url)

        if self.logger:
            self.logger.info(
                f"Brute forcing {base_url} with {len(words)} entries "
                f"at {self.rate} req/s")

        submissions: asyncio.Queue = asyncio.Queue(maxsize=1)
        outcomes: asyncio.Queue = asyncio.Queue(maxsize=1)

        async with self._client() as client:
            tasks = [
                asyncio.create_task(
                    self._lane(i, client, submissions, outcomes),
                    name=f"lane-{i}")
                for i in range(self.rate)
            ]
            tasks.append(asyncio.create_task(
                self._produce(template, words, base_url, submissions),
                name="producer"))
            tasks.append(asyncio.create_task(
                collector.consume(outcomes), name="collector"))
            try:
                await self._supervise(tasks)
            finally:
                for task in tasks:
                    if not task.done():
                        task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)

        return collector.verdicts
