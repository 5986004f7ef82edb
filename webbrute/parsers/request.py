import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

import httpx

from webbrute.core.errors import (ConfigurationError, ErrorCode,
                                  TemplateParseError,
                                  TemplateSubstitutionError)
from webbrute.core.models import CandidateRequest

PLACEHOLDER = "FUZZ"

# RFC 9110 token: method names and header field names
_TOKEN_RX = re.compile(rb"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_VERSION_RX = re.compile(rb"^HTTP/\d\.\d$")
_HEAD_END_RX = re.compile(rb"\r?\n\r?\n")


@dataclass
class ParsedRequest:
    method: str
    target: str
    version: str
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    def header_map(self) -> Dict[str, str]:
        return merge_headers(self.headers)


def merge_headers(pairs: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """Fold an ordered header list into a dict, last duplicate wins.

    Names compare case-insensitively; the spelling of the last occurrence
    is the one kept.
    """
    merged: Dict[str, str] = {}
    for name, value in pairs:
        for existing in [k for k in merged if k.lower() == name.lower()]:
            del merged[existing]
        merged[name] = value
    return merged


def _split_head(raw: bytes) -> Tuple[bytes, int]:
    """Return (header block, offset of the first body byte)."""
    start = len(raw) - len(raw.lstrip(b"\r\n"))
    m = _HEAD_END_RX.search(raw, start)
    if m:
        return raw[start:m.start()], m.end()
    # no blank line at all: everything is head, nothing is body
    return raw[start:].rstrip(), len(raw)


def _parse_request_line(line: bytes) -> Tuple[str, str, str]:
    parts = line.split()
    if len(parts) not in (2, 3):
        raise TemplateParseError(ErrorCode.TEMPLATE_BAD_REQUEST_LINE,
                                 "invalid request line",
                                 {"request_line": line.decode("utf-8", "replace")})
    method, target = parts[0], parts[1]
    version = parts[2] if len(parts) == 3 else b"HTTP/1.1"
    if not _TOKEN_RX.match(method):
        raise TemplateParseError(ErrorCode.TEMPLATE_BAD_REQUEST_LINE,
                                 "invalid method token",
                                 {"method": method.decode("utf-8", "replace")})
    if not _VERSION_RX.match(version):
        raise TemplateParseError(ErrorCode.TEMPLATE_BAD_REQUEST_LINE,
                                 "invalid HTTP version",
                                 {"version": version.decode("utf-8", "replace")})
    return (method.decode("ascii"), target.decode("utf-8", "replace"),
            version.decode("ascii"))


def _parse_header_line(line: bytes) -> Tuple[str, str]:
    name, sep, value = line.partition(b":")
    if not sep or not _TOKEN_RX.match(name):
        raise TemplateParseError(ErrorCode.TEMPLATE_BAD_HEADER,
                                 "invalid header line",
                                 {"header": line.decode("utf-8", "replace")})
    return name.decode("ascii"), value.strip(b" \t").decode("utf-8", "replace")


def _content_length(headers: List[Tuple[str, str]]) -> Optional[int]:
    values = [v for k, v in headers if k.lower() == "content-length"]
    if not values:
        return None
    value = values[-1].strip()
    if not (value.isascii() and value.isdigit()):
        raise TemplateParseError(ErrorCode.TEMPLATE_BAD_CONTENT_LENGTH,
                                 "unparsable Content-Length",
                                 {"content_length": value})
    return int(value)


def _parse_head(head: bytes) -> Tuple[str, str, str, List[Tuple[str, str]]]:
    if not head.strip():
        raise TemplateParseError(ErrorCode.TEMPLATE_EMPTY, "request is empty")

    lines = [l.rstrip(b"\r") for l in head.split(b"\n")]
    method, target, version = _parse_request_line(lines[0])
    headers = [_parse_header_line(l) for l in lines[1:]]
    return method, target, version, headers


def parse_request(raw: bytes) -> ParsedRequest:
    """
    Parse raw HTTP/1.x request bytes:

        POST /login HTTP/1.1
        Host: example.com
        Content-Length: 9

        user=FUZZ

    With a Content-Length header the body is exactly that many bytes after
    the blank line; anything past it is ignored. Without one the body is
    the rest of the input minus trailing whitespace.
    """
    head, body_offset = _split_head(raw)
    method, target, version, headers = _parse_head(head)

    length = _content_length(headers)
    if length is None:
        body = raw[body_offset:].rstrip()
    else:
        body = raw[body_offset:body_offset + length]
        if len(body) < length:
            raise TemplateParseError(ErrorCode.TEMPLATE_SHORT_BODY,
                                     "body shorter than Content-Length",
                                     {"content_length": length,
                                      "available": len(body)})

    return ParsedRequest(method=method, target=target, version=version,
                         headers=headers, body=body)


def parse_base_target(base: Union[str, httpx.URL]) -> httpx.URL:
    try:
        url = base if isinstance(base, httpx.URL) else httpx.URL(base)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ConfigurationError(ErrorCode.CONFIG_INVALID_TARGET,
                                 f"unparsable target URL: {exc}",
                                 {"target": str(base)}) from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(ErrorCode.CONFIG_INVALID_TARGET,
                                 "target must be an absolute http(s) URL",
                                 {"target": str(base)})
    return url


def resolve_target(base: Union[str, httpx.URL], target: str) -> httpx.URL:
    base_url = parse_base_target(base)
    try:
        return base_url.join(target)
    except httpx.InvalidURL as exc:
        raise TemplateParseError(ErrorCode.TEMPLATE_BAD_TARGET,
                                 f"request target does not resolve: {exc}",
                                 {"target": target}) from exc


class RequestTemplate:
    def __init__(self, raw: bytes, placeholder: str = PLACEHOLDER,
                 source: Optional[str] = None) -> None:
        """
        Immutable raw request skeleton. Parsed once here so a broken
        template fails before any wordlist entry is touched.

        The body is cut to the template's own Content-Length here, before
        any substitution; entries of any length then go into that body.
        """
        self._raw = bytes(raw)
        self._placeholder = placeholder.encode("utf-8")
        self.source = source
        try:
            self.parsed = parse_request(self._raw)
        except TemplateParseError as exc:
            if source:
                exc.details["template"] = source
            raise
        self._head, _ = _split_head(self._raw)
        self._body = self.parsed.body

    @classmethod
    def from_file(cls, requestFilename: str,
                  placeholder: str = PLACEHOLDER) -> "RequestTemplate":
        try:
            with open(requestFilename, "rb") as f:
                raw = f.read()
        except OSError as exc:
            raise ConfigurationError(ErrorCode.CONFIG_UNREADABLE_INPUT,
                                     f"cannot read request file: {exc.strerror}",
                                     {"template": requestFilename}) from exc
        return cls(raw, placeholder=placeholder, source=requestFilename)

    @property
    def raw(self) -> bytes:
        return self._raw

    @property
    def fuzz_count(self) -> int:
        return (self._head.count(self._placeholder)
                + self._body.count(self._placeholder))

    def substitute(self, word: str) -> Tuple[bytes, bytes]:
        """Return (header block, body) with the word in every slot."""
        # bytes.replace is a single pass, so a word containing the
        # placeholder is inserted literally
        value = word.encode("utf-8")
        return (self._head.replace(self._placeholder, value),
                self._body.replace(self._placeholder, value))

    def materialize(self, word: str,
                    base_target: Union[str, httpx.URL]) -> CandidateRequest:
        head, body = self.substitute(word)
        method, target, _, headers = _parse_head(head)
        headers = [(k, str(len(body)) if k.lower() == "content-length" else v)
                   for k, v in headers]
        return CandidateRequest(
            word=word,
            method=method,
            url=resolve_target(base_target, target),
            headers=merge_headers(headers),
            body=body,
        )

    def validate(self, words: Iterable[str],
                 base_target: Union[str, httpx.URL]) -> int:
        """Materialize every entry once and throw the results away.

        Returns the number of entries checked. Raises
        TemplateSubstitutionError naming the first entry that breaks the
        request.
        """
        base_url = parse_base_target(base_target)
        count = 0
        for count, word in enumerate(words, 1):
            try:
                self.materialize(word, base_url)
            except TemplateParseError as exc:
                raise TemplateSubstitutionError(exc, word, count) from exc
        return count

    def __str__(self) -> str:
        p = self.parsed
        return (f"Method: {p.method}\nTarget: {p.target}\n"
                f"Headers: {p.header_map()}\nBody: {p.body!r}\n"
                f"Placeholders: {self.fuzz_count}")


def materialize(template: RequestTemplate, word: str,
                base_target: Union[str, httpx.URL]) -> CandidateRequest:
    return template.materialize(word, base_target)
