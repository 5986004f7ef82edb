from typing import List

from webbrute.core.errors import ConfigurationError, ErrorCode


def split_words(data: bytes) -> List[str]:
    """
    One entry per line, trailing whitespace trimmed, leading kept.
    Blank lines and duplicates stay; a final newline does not add an
    empty entry.
    """
    text = data.decode("utf-8")
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [line.rstrip() for line in lines]


def load_wordlist(wordlistFilename: str) -> List[str]:
    try:
        with open(wordlistFilename, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise ConfigurationError(ErrorCode.CONFIG_UNREADABLE_INPUT,
                                 f"cannot read wordlist: {exc.strerror}",
                                 {"wordlist": wordlistFilename}) from exc
    try:
        return split_words(data)
    except UnicodeDecodeError as exc:
        raise ConfigurationError(ErrorCode.CONFIG_UNREADABLE_INPUT,
                                 "wordlist is not valid UTF-8",
                                 {"wordlist": wordlistFilename,
                                  "offset": exc.start}) from exc
