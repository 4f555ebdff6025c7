import io
import os
import sys
from datetime import datetime, timezone
from unittest import mock

import pytest

from newscheck.feed import Entry
from newscheck.term import (
    format_time,
    html_to_text,
    page_item,
    pretty_print_item,
    pretty_print_title,
    print_error,
    print_pacman,
    print_warning,
    prompt,
    terminal_width,
)

TS = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _size(columns):
    return os.terminal_size((columns, 40))


def test_print_error(capsys):
    print_error("boom")
    assert capsys.readouterr().err == "ERROR: boom\n"


def test_print_warning(capsys):
    print_warning("careful")
    assert capsys.readouterr().err == "WARN: careful\n"


def test_print_pacman(capsys):
    print_pacman("hello")
    assert capsys.readouterr().err == ":: newscheck: hello\n"


def test_terminal_width_default():
    with mock.patch("newscheck.term.os.get_terminal_size", side_effect=OSError):
        assert terminal_width() == 80


def test_terminal_width_from_terminal():
    with mock.patch("newscheck.term.os.get_terminal_size", return_value=_size(123)):
        with mock.patch("newscheck.term.sys.stdout") as stdout:
            stdout.fileno.return_value = 1
            assert terminal_width() == 123


def test_format_time_round_trip():
    text = format_time(TS)
    assert datetime.strptime(text, "%a, %d %b %Y %H:%M:%S %z") == TS


def test_html_paragraphs():
    assert html_to_text("<p>a</p><p>b</p>", 80) == "a\n\nb"


def test_html_inline_and_entities():
    result = html_to_text("<p>Fish &amp; <b>chips</b></p>", 80)
    assert result == "Fish & chips"


def test_html_list():
    assert html_to_text("<ul><li>one</li><li>two</li></ul>", 80) == "* one\n* two"


def test_html_link_footnote():
    result = html_to_text('<p>See <a href="https://example.com/x">here</a>.</p>', 80)
    assert "[here][1]" in result
    assert result.splitlines()[-1] == "[1]: https://example.com/x"


def test_html_wrapping_keeps_words():
    words = ("lorem ipsum dolor sit amet consectetur adipiscing elit " * 5).split()
    result = html_to_text("<p>" + " ".join(words) + "</p>", 20)
    assert all(len(line) <= 20 for line in result.splitlines())
    assert result.split() == words


def test_html_skips_script():
    result = html_to_text("<p>visible</p><script>hidden()</script>", 80)
    assert "hidden" not in result
    assert "visible" in result


def test_pretty_print_title_fills_width(capsys, monkeypatch):
    entry = Entry("A title", "body", TS)
    monkeypatch.setattr(sys.stdout, "fileno", lambda: 1, raising=False)
    with mock.patch("newscheck.term.os.get_terminal_size", return_value=_size(100)):
        pretty_print_title(3, entry)
    line = capsys.readouterr().out.rstrip("\n")
    assert line.startswith("3: A title ")
    assert line.endswith(format_time(TS))
    assert len(line) == 100


def test_pretty_print_item_raw(capsys):
    entry = Entry("Title", "<p>Body</p>", TS)
    pretty_print_item(entry, True)
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["Title", format_time(TS), "<p>Body</p>"]


def test_pretty_print_item_formatted(capsys):
    entry = Entry("Title", "<p>Body</p>", TS)
    pretty_print_item(entry, False)
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Title"
    assert lines[2] == "Body"


def test_page_item_missing_pager_falls_back(capsys):
    entry = Entry("Title", "<p>Body</p>", TS)
    with mock.patch("newscheck.term.shutil.which", return_value=None):
        page_item(entry, True, "no-such-pager")
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "Title"
    assert out.count("Title") == 1


def test_page_item_sends_text_to_pager():
    entry = Entry("Title", "<p>Body</p>", TS)
    proc = mock.Mock()
    with mock.patch("newscheck.term.shutil.which", return_value="/usr/bin/less"), \
            mock.patch("newscheck.term.subprocess.Popen", return_value=proc) as popen:
        page_item(entry, True, "less")
    assert popen.call_args.args[0] == ["less"]
    sent = proc.communicate.call_args.args[0]
    assert sent == f"# Title\n{format_time(TS)}\n<p>Body</p>\n"


def test_page_item_spawn_failure_falls_back(capsys):
    entry = Entry("Title", "raw body", TS)
    with mock.patch("newscheck.term.shutil.which", return_value="/usr/bin/less"), \
            mock.patch("newscheck.term.subprocess.Popen", side_effect=OSError):
        page_item(entry, True, "less")
    assert capsys.readouterr().out.splitlines()[-1] == "raw body"


@pytest.mark.parametrize("answer, expected", [
    ("y\n", True), ("YES\n", True), ("\n", True), ("", True),
    ("n\n", False), ("No\n", False),
])
def test_prompt_answers(monkeypatch, answer, expected):
    monkeypatch.setattr("sys.stdin", io.StringIO(answer))
    assert prompt("Continue? ") is expected


def test_prompt_retries_on_invalid(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("maybe\nn\n"))
    assert prompt("Continue? ") is False
    captured = capsys.readouterr()
    assert "Invalid input" in captured.err
    assert captured.out.count("Continue? ") == 2