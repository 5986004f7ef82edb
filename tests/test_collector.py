import asyncio
from unittest.mock import MagicMock

import httpx
import pytest

from webbrute.checkers.criteria import SuccessCriteria
from webbrute.core.collector import Collector
from webbrute.core.models import DispatchOutcome, Verdict, VerdictRecord


def response(status=200, body=b"", word="w"):
    return DispatchOutcome(word=word, status_code=status, body=body)


def failure(word="w"):
    return DispatchOutcome(word=word, error=httpx.ConnectError("refused"),
                           attempts=4)


ALL = SuccessCriteria(status=200, body="Welcome", not_body="Invalid")


def test_no_criteria_accepts_any_response():
    c = SuccessCriteria()
    assert not c.configured
    assert c.check_response(response(status=500))
    assert c.describe() == "any response"


def test_all_checks_hold():
    assert ALL.check_response(response(200, b"Welcome back"))


@pytest.mark.parametrize("outcome", [
    response(302, b"Welcome back"),          # status flipped
    response(200, b"Hello back"),            # required text missing
    response(200, b"Welcome. Invalid token"),  # forbidden text present
])
def test_flipping_one_check_flips_verdict(outcome):
    assert not ALL.check_response(outcome)


def test_transport_failure_never_succeeds():
    assert not SuccessCriteria().check_response(failure())


def test_body_decoded_permissively():
    c = SuccessCriteria(body="ok")
    assert c.check_response(response(body=b"\xff\xfe ok \xc3"))


def test_status_only():
    c = SuccessCriteria(status=401)
    assert c.check_response(response(401, b"Invalid"))
    assert not c.check_response(response(200))


def test_classify_failure_warns():
    log = MagicMock(verbose=1)
    col = Collector(SuccessCriteria(), expected=1, logger=log)
    assert col.classify(failure("x")) == VerdictRecord("x", Verdict.FAILURE)
    log.warn.assert_called_once()


@pytest.mark.asyncio
async def test_consume_exact_count_in_arrival_order():
    seen = []
    col = Collector(SuccessCriteria(status=200), expected=3, on_verdict=seen.append)
    q: asyncio.Queue = asyncio.Queue()
    for o in (response(200, word="c"), failure("a"), response(404, word="b"),
              response(200, word="extra")):
        q.put_nowait(o)

    verdicts = await col.consume(q)

    assert [(v.word, v.verdict) for v in verdicts] == [
        ("c", Verdict.SUCCESS), ("a", Verdict.FAILURE), ("b", Verdict.FAILURE)]
    assert seen == verdicts
    assert q.qsize() == 1  # left alone
    assert [v.word for v in col.successes] == ["c"]


@pytest.mark.asyncio
async def test_emit_goes_to_logger_without_callback():
    log = MagicMock(verbose=1)
    col = Collector(SuccessCriteria(), expected=1, logger=log)
    q: asyncio.Queue = asyncio.Queue()
    q.put_nowait(response(word="admin"))
    await col.consume(q)
    log.verdict.assert_called_once_with("admin", Verdict.SUCCESS)
