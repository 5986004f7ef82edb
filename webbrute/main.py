import argparse
import asyncio
import sys
import time

from webbrute.core.collector import Collector
from webbrute.core.config import DEFAULT_RATE, DEFAULT_TIMEOUT, RunConfig
from webbrute.core.engine import Engine
from webbrute.core.errors import BruteError
from webbrute.parsers.request import RequestTemplate
from webbrute.parsers.wordlist import load_wordlist
from webbrute.reporters.console import Log


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Rate-limited HTTP brute forcer")
    sub = p.add_subparsers(dest="command", required=True)

    h = sub.add_parser("http", help="Brute force an HTTP endpoint")
    h.add_argument("-R", "--raw-request", required=True,
                   help="File containing the raw HTTP request (FUZZ marks the slot)")
    h.add_argument("-t", "--target", required=True,
                   help="Base URL the request path is resolved against")
    h.add_argument("-w", "--wordlist", required=True,
                   help="File with one value per line")
    h.add_argument("-r", "--rate", type=int, default=DEFAULT_RATE,
                   help="Requests per second")
    h.add_argument("-s", "--status", type=int,
                   help="Status code considered a success")
    h.add_argument("-b", "--body",
                   help="String that must appear in the response body")
    h.add_argument("-B", "--not-body",
                   help="String that must NOT appear in the response body")
    h.add_argument("--proxy", help="Proxy (e.g. http://127.0.0.1:8080)")
    h.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT,
                   help="Per-request timeout in seconds")
    h.add_argument("-v", "--verbose", action="count", default=1,
                   help="-v, -vv")
    h.add_argument("-q", "--quiet", action="store_true",
                   help="Only print verdicts and errors")
    return p


async def http_brute_force(cfg: RunConfig, log: Log) -> Collector:
    template = RequestTemplate.from_file(cfg.raw_request)
    words = load_wordlist(cfg.wordlist)
    if template.fuzz_count == 0:
        log.warn("Request contains no FUZZ placeholder; "
                 "every entry sends the same request")
    if not cfg.criteria.configured:
        log.warn("No success criteria given; any received response is a SUCCESS")
    if log.verbose >= 2:
        log.debug(f"Template:\n{template}")
        log.debug(f"Success when: {cfg.criteria.describe()}")

    collector = Collector(cfg.criteria, expected=len(words), logger=log)
    engine = Engine(rate=cfg.rate, proxy=cfg.proxy, timeout=cfg.timeout,
                    logger=log)
    await engine.run(template, words, cfg.target, collector)
    return collector


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    log = Log(verbose=0 if args.quiet else args.verbose)

    start = time.monotonic()
    try:
        cfg = RunConfig.from_args(args)
        collector = asyncio.run(http_brute_force(cfg, log))
    except BruteError as exc:
        log.fail(str(exc))
        return 1
    except KeyboardInterrupt:
        log.warn("Interrupted")
        return 130

    log.summary(len(collector.verdicts), len(collector.successes),
                time.monotonic() - start)
    return 0


if __name__ == "__main__":
    sys.exit(main())
