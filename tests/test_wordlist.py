import pytest

from webbrute.core.errors import ConfigurationError, ErrorCode
from webbrute.parsers.wordlist import load_wordlist, split_words


def test_trailing_whitespace_trimmed_leading_kept():
    assert split_words(b"admin  \n  root\t\nguest\r\n") == ["admin", "  root", "guest"]


def test_blank_lines_and_duplicates_are_entries():
    assert split_words(b"a\n\na\n") == ["a", "", "a"]


def test_final_newline_adds_no_entry():
    assert split_words(b"a\nb") == ["a", "b"]
    assert split_words(b"a\nb\n") == ["a", "b"]
    assert split_words(b"\n") == [""]
    assert split_words(b"") == []


def test_load_wordlist(tmp_path):
    f = tmp_path / "words.txt"
    f.write_bytes("admin\nпароль\n".encode("utf-8"))
    assert load_wordlist(str(f)) == ["admin", "пароль"]


def test_load_wordlist_not_utf8(tmp_path):
    f = tmp_path / "words.txt"
    f.write_bytes(b"ok\n\xff\xfe\n")
    with pytest.raises(ConfigurationError) as ei:
        load_wordlist(str(f))
    assert ei.value.code == ErrorCode.CONFIG_UNREADABLE_INPUT
    assert ei.value.details["wordlist"] == str(f)


def test_load_wordlist_missing(tmp_path):
    with pytest.raises(ConfigurationError):
        load_wordlist(str(tmp_path / "nope.txt"))
