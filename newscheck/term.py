"""Terminal output: messages, formatted news items, paging and prompts."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import textwrap
from datetime import datetime
from html.parser import HTMLParser

from newscheck.feed import Entry

DEFAULT_WIDTH = 80
TIME_FORMAT = "%a, %d %b %Y %H:%M:%S %z"

_RESET = "\x1b[0m"


def _is_tty(stream) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def _print_tagged(tag: str, colour: str, msg: str) -> None:
    if _is_tty(sys.stderr):
        tag = f"{colour}{tag}{_RESET}"
    print(f"{tag}{msg}", file=sys.stderr, flush=True)


def print_error(msg: str) -> None:
    """Print an error message to stderr."""
    _print_tagged("ERROR: ", "\x1b[31m", msg)


def print_warning(msg: str) -> None:
    """Print a warning message to stderr."""
    _print_tagged("WARN: ", "\x1b[33m", msg)


def print_pacman(msg: str) -> None:
    """Print a message in the style of a pacman hook."""
    _print_tagged(":: newscheck: ", "\x1b[33m", msg)


def terminal_width() -> int:
    """Return the width of the terminal on stdout, or the default width."""
    try:
        return os.get_terminal_size(sys.stdout.fileno()).columns
    except (OSError, ValueError, AttributeError):
        return DEFAULT_WIDTH


def format_time(timestamp: datetime) -> str:
    """Format a timestamp in local time."""
    return timestamp.astimezone().strftime(TIME_FORMAT)


_BLOCKS = {"p", "div", "blockquote", "table", "tr", "section", "article",
           "header", "footer", "hr", "dl", "dt", "dd", "pre", "ul", "ol", "li",
           "h1", "h2", "h3", "h4", "h5", "h6"}
_SKIPPED = {"script", "style", "head", "title"}


class _HtmlText(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        # each block: [prefix, text, preformatted, list item]
        self.blocks: list[list] = [["", "", False, False]]
        self.links: list[str] = []
        self._lists: list[list] = []
        self._hrefs: list[str | None] = []
        self._skip = 0
        self._pre = 0

    def _new_block(self, prefix: str = "", item: bool = False) -> None:
        if self.blocks[-1][1].strip():
            self.blocks.append(["", "", False, False])
        self.blocks[-1][:] = [prefix, "", self._pre > 0, item]

    def handle_starttag(self, tag, attrs):
        if tag in _SKIPPED:
            self._skip += 1
        elif tag == "br":
            self.blocks[-1][1] += "\n"
        elif tag == "a":
            self._hrefs.append(dict(attrs).get("href"))
            if self._hrefs[-1]:
                self.blocks[-1][1] += "["
        elif tag == "li":
            if self._lists and self._lists[-1][0] == "ol":
                self._lists[-1][1] += 1
                bullet = f"{self._lists[-1][1]}. "
            else:
                bullet = "* "
            self._new_block("  " * max(len(self._lists) - 1, 0) + bullet, True)
        elif tag in _BLOCKS:
            if tag == "pre":
                self._pre += 1
            elif tag in ("ul", "ol"):
                self._lists.append([tag, 0])
            prefix = "#" * int(tag[1]) + " " if tag[0] == "h" and tag[1:].isdigit() else ""
            self._new_block(prefix)

    def handle_endtag(self, tag):
        if tag in _SKIPPED:
            self._skip = max(self._skip - 1, 0)
        elif tag == "a" and self._hrefs:
            href = self._hrefs.pop()
            if href:
                self.links.append(href)
                self.blocks[-1][1] += f"][{len(self.links)}]"
        elif tag in _BLOCKS:
            if tag == "pre":
                self._pre = max(self._pre - 1, 0)
            elif tag in ("ul", "ol") and self._lists:
                self._lists.pop()
            self._new_block()

    def handle_data(self, data):
        if not self._skip:
            self.blocks[-1][1] += data

    def render(self, width: int) -> str:
        out = ""
        previous_item = False
        for prefix, text, preformatted, item in (b for b in self.blocks if b[1].strip()):
            rendered = text.strip("\n") if preformatted else _wrap(prefix, text, width)
            if out:
                out += "\n" if item and previous_item else "\n\n"
            out += rendered
            previous_item = item
        if self.links:
            footnotes = "\n".join(f"[{n}]: {url}" for n, url in enumerate(self.links, 1))
            out += ("\n\n" if out else "") + footnotes
        return out


def _wrap(prefix: str, text: str, width: int) -> str:
    indent = " " * len(prefix)
    segments = [" ".join(s.split()) for s in text.split("\n")]
    return "\n".join(
        textwrap.fill(words, max(width, len(prefix) + 1),
                      initial_indent=indent if n else prefix,
                      subsequent_indent=indent, break_on_hyphens=False)
        for n, words in enumerate(s for s in segments if s)
    )


def html_to_text(html: str, width: int) -> str:
    """Render HTML as plain text wrapped to ``width`` columns."""
    parser = _HtmlText()
    parser.feed(html)
    parser.close()
    return parser.render(width)


def pretty_print_title(index: int, entry: Entry) -> None:
    """Print a one-line summary of an entry, timestamp aligned right."""
    pad = max(terminal_width() - (len(entry.title) + 4), 0)
    print(f"{index}: {entry.title} {format_time(entry.timestamp):>{pad}}")


def _body(entry: Entry, raw: bool, width: int) -> str:
    return entry.body if raw else html_to_text(entry.body, width)


def pretty_print_item(entry: Entry, raw: bool) -> None:
    """Print an entry's title, time and body."""
    body = _body(entry, raw, terminal_width())
    print(f"\x1b[1m{entry.title}{_RESET}" if _is_tty(sys.stdout) else entry.title)
    print(format_time(entry.timestamp))
    print(body)


def page_item(entry: Entry, raw: bool, pager: str) -> None:
    """Show an entry through ``pager``, falling back to plain printing."""
    try:
        if shutil.which(pager) is None:
            raise OSError(pager)
        proc = subprocess.Popen([pager], stdin=subprocess.PIPE, text=True)
    except OSError:
        pretty_print_item(entry, raw)
        return
    proc.communicate(f"# {entry.title}\n{format_time(entry.timestamp)}\n"
                     f"{_body(entry, raw, DEFAULT_WIDTH)}\n")


def prompt(text: str) -> bool:
    """Ask a yes/no question on stdin; an empty answer means yes."""
    while True:
        print(text, end="", flush=True)
        answer = sys.stdin.readline().strip().lower()
        if answer in ("y", "yes", ""):
            return True
        if answer in ("n", "no"):
            return False
        print_error("Invalid input. Please enter 'y' or 'n'.")