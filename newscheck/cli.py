"""Command-line interface: list, check and read the news."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass

import psutil

from newscheck import feed
from newscheck.feed import Entry, FeedError
from newscheck.read_list import ReadList
from newscheck.term import (
    page_item,
    pretty_print_item,
    pretty_print_title,
    print_error,
    print_pacman,
    print_warning,
    prompt,
)

VERSION = "0.2.2"
PROG = "newscheck"
READ_LIST_PATH = "/var/lib/newscheck/data"
FEED_ENDPOINT = "https://archlinux.org/feeds/news/"
SHELLS = ("bash", "zsh", "fish")

_COMPLETIONS_EPILOG = """\
You should not need to run this command manually. During package installation,
the completions will be generated automatically and installed to the appropriate location
for your shell. Shell completion should work out of the box for bash, zsh, and fish.

If for any reason you need to do so manually, you can run this command to
generate completions for your shell of choice. For example, to generate
completions for bash, you can run:

$ newscheck completions bash > ~/.bash_completion.d/newscheck.bash

or for zsh:

$ newscheck completions zsh > ~/.zsh/site_functions/_newscheck"""

# (short, long, help, takes a value) for the visible global options.
_GLOBAL_OPTIONS = (
    ("-r", "--raw", "Print raw HTML instead of formatted text", False),
    (None, "--clear-readlist", "Clear the read list file", False),
    ("-f", "--file", "Path to the read list file", True),
    (None, "--url", "Endpoint for the news feed", True),
    ("-p", "--pager", "Use a pager to display news items", True),
    ("-h", "--help", "Print help", False),
    ("-V", "--version", "Print version", False),
)

# Visible subcommands: short description and their own options.
_SUBCOMMANDS = {
    "list": ("List the most recent news entries", (
        ("--reverse", "List news items in reverse order"),
        ("--unread", "Print raw HTML instead of formatted text"),
    )),
    "check": ("Check for unread news items", ()),
    "read": ("Read the news", (
        ("--all", "Mark all news items as read without printing"),
    )),
}


class Blocked(Exception):
    """Raised to stop a pacman upgrade while news is unread."""

    def __init__(self) -> None:
        super().__init__("pacman update blocked due to unread news items")


@dataclass(frozen=True)
class Config:
    """Settings shared by all subcommands."""

    endpoint: str = FEED_ENDPOINT
    raw: bool = False
    read_list_path: str = READ_LIST_PATH
    overwrite: bool = False
    pager: str | None = None
    hook: bool = False


def _index(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid index {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"invalid index {text!r}")
    return value


def _add_global_flags(parser: argparse.ArgumentParser, suppress: bool) -> None:
    def default(value):
        return argparse.SUPPRESS if suppress else value

    parser.add_argument("-r", "--raw", action="store_true", default=default(False),
                        help="Print raw HTML instead of formatted text")
    parser.add_argument("--clear-readlist", action="store_true", default=default(False),
                        help="Clear the read list file")
    parser.add_argument("-f", "--file", dest="readlist_path", default=default(READ_LIST_PATH),
                        help="Path to the read list file")
    parser.add_argument("--url", default=default(FEED_ENDPOINT),
                        help="Endpoint for the news feed")
    parser.add_argument("-p", "--pager", default=default(None),
                        help="Use a pager to display news items")
    parser.add_argument("--debug-pacman", action="store_true", default=default(False),
                        help=argparse.SUPPRESS)
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {VERSION}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser; global flags are accepted on every subcommand."""
    parser = argparse.ArgumentParser(prog=PROG, description="Another Arch Linux news reader")
    _add_global_flags(parser, suppress=False)
    sub = parser.add_subparsers(dest="subcommand", metavar="{list,check,read}")
    sub.required = True

    def add(name: str, **kwargs) -> argparse.ArgumentParser:
        child = sub.add_parser(name, prog=f"{PROG} {name}", **kwargs)
        _add_global_flags(child, suppress=True)
        return child

    list_parser = add(
        "list", help="List the most recent news entries (see `newscheck list --help` for options)")
    list_parser.add_argument("--reverse", action="store_true",
                             help="List news items in reverse order")
    list_parser.add_argument("--unread", dest="only_unread", action="store_true",
                             help="Print raw HTML instead of formatted text")

    add("check", help="Check for unread news items")

    read_parser = add("read", help="Read the news (see `newscheck read --help` for options)")
    read_parser.add_argument("num_item", nargs="?", type=_index, default=None)
    read_parser.add_argument("--all", action="store_true",
                             help="Mark all news items as read without printing")

    completions = add("completions", epilog=_COMPLETIONS_EPILOG,
                      formatter_class=argparse.RawDescriptionHelpFormatter)
    completions.add_argument("shell", choices=SHELLS, help="Shell to generate completions for")
    return parser


def is_under_pacman() -> bool | None:
    """Tell whether the parent process is pacman, or None if unknown."""
    try:
        parent = psutil.Process().parent()
        if parent is None:
            return None
        return parent.name() == "pacman"
    except psutil.Error:
        return None


def _sq(text: str) -> str:
    return "'" + text.replace("'", "'\\''") + "'"


def _option_words() -> list[str]:
    return [opt for short, long, _, _ in _GLOBAL_OPTIONS for opt in (short, long) if opt]


def _bash_script() -> str:
    global_words = " ".join(_option_words())
    names = "|".join(_SUBCOMMANDS)
    lines = [
        "_newscheck() {",
        '    local cur="${COMP_WORDS[COMP_CWORD]}"',
        '    local sub="" word opts',
        '    for word in "${COMP_WORDS[@]:1:COMP_CWORD-1}"; do',
        '        case "$word" in',
        "            " + names + ') sub="$word"; break ;;',
        "        esac",
        "    done",
        '    case "$sub" in',
    ]
    for name, (_, options) in _SUBCOMMANDS.items():
        words = " ".join([opt for opt, _ in options] + [global_words])
        lines.append("        " + name + ') opts="' + words + '" ;;')
    lines.append('        *) opts="' + " ".join(list(_SUBCOMMANDS) + [global_words]) + '" ;;')
    lines += [
        "    esac",
        '    COMPREPLY=( $(compgen -W "$opts" -- "$cur") )',
        "}",
        "complete -F _newscheck newscheck",
    ]
    return "\n".join(lines) + "\n"


def _zsh_script() -> str:
    lines = [
        "#compdef newscheck",
        "",
        "_newscheck() {",
        "    local context state line",
        "    local -a commands",
        "    commands=(",
    ]
    for name, (description, _) in _SUBCOMMANDS.items():
        lines.append("        " + _sq(f"{name}:{description}"))
    lines += ["    )", "    _arguments -C \\"]
    for short, long, help_text, takes_value in _GLOBAL_OPTIONS:
        suffix = ":value: " if takes_value else ""
        for opt in (short, long):
            if opt:
                lines.append("        " + _sq(f"{opt}[{help_text}]{suffix}") + " \\")
    lines += [
        "        '1: :->command' \\",
        "        '*:: :->args'",
        "    case $state in",
        "        command)",
        "            _describe 'command' commands",
        "            ;;",
        "        args)",
        "            case $line[1] in",
    ]
    for name, (_, options) in _SUBCOMMANDS.items():
        specs = " ".join(_sq(f"{opt}[{help_text}]") for opt, help_text in options)
        lines.append(f"                {name}) " + (f"_arguments {specs}" if specs else ":") + " ;;")
    lines += [
        "            esac",
        "            ;;",
        "    esac",
        "}",
        "",
        '_newscheck "$@"',
    ]
    return "\n".join(lines) + "\n"


def _fish_script() -> str:
    lines = []
    for name, (description, _) in _SUBCOMMANDS.items():
        lines.append(f"complete -c newscheck -n __fish_use_subcommand -f -a {name} -d "
                     + _sq(description))
    for short, long, help_text, takes_value in _GLOBAL_OPTIONS:
        parts = ["complete -c newscheck"]
        if short:
            parts.append(f"-s {short[1:]}")
        parts.append(f"-l {long[2:]}")
        if takes_value:
            parts.append("-r")
        parts.append("-d " + _sq(help_text))
        lines.append(" ".join(parts))
    for name, (_, options) in _SUBCOMMANDS.items():
        for opt, help_text in options:
            lines.append(
                "complete -c newscheck -n " + _sq(f"__fish_seen_subcommand_from {name}")
                + f" -l {opt[2:]} -d " + _sq(help_text)
            )
    return "\n".join(lines) + "\n"


def completion_script(shell: str) -> str:
    """Return a completion script for ``shell``."""
    generators = {"bash": _bash_script, "zsh": _zsh_script, "fish": _fish_script}
    try:
        return generators[shell]()
    except KeyError:
        raise ValueError(f"unsupported shell {shell!r}") from None


def _show(entry: Entry, conf: Config) -> None:
    if conf.pager is not None:
        page_item(entry, conf.raw, conf.pager)
    else:
        pretty_print_item(entry, conf.raw)


def list_entries(entries: Sequence[Entry], conf: Config, reverse: bool, unread: bool) -> None:
    """Print one numbered line per entry."""
    if unread:
        shown = ReadList.load(conf.read_list_path, conf.overwrite).unread(entries)
    else:
        shown = list(entries)
    numbered = list(enumerate(shown))
    if reverse:
        numbered.reverse()
    for index, entry in numbered:
        pretty_print_title(index, entry)


def check_entries(entries: Sequence[Entry], conf: Config) -> None:
    """Report unread news; a single unread item is shown and marked read."""
    read_list = ReadList.load(conf.read_list_path, conf.overwrite)
    unread = read_list.unread(entries)
    if not unread:
        print("There are no unread news items.")
        return
    if len(unread) == 1:
        if conf.hook:
            print_pacman("stopping upgrade to print news")
        pretty_print_item(unread[0], conf.raw)
        read_list.add(unread[0])
        read_list.save(conf.read_list_path)
        if conf.hook:
            print_pacman("you can re-run your upgrade command to complete the upgrade.")
            raise Blocked()
        return
    print(f'There are {len(unread)} unread news items. '
          f'Use "newscheck read [# of news item]" to read them.')
    if conf.hook:
        print_pacman("run `newscheck read` to read the news before proceeding with the upgrade.")
        raise Blocked()


def read_entries(entries: Sequence[Entry], index: int, conf: Config) -> None:
    """Show the entry at ``index`` and mark it read."""
    read_list = ReadList.load(conf.read_list_path, conf.overwrite)
    if not 0 <= index < len(entries):
        raise IndexError(f"there is no news item with index {index}")
    entry = entries[index]
    _show(entry, conf)
    read_list.add(entry)
    read_list.save(conf.read_list_path)


def mark_all_read(entries: Sequence[Entry], conf: Config) -> None:
    """Replace the read list with the digests of all ``entries``."""
    ReadList(b"".join(entry.digest() for entry in entries)).save(conf.read_list_path)


def read_all_unread(entries: Sequence[Entry], conf: Config) -> None:
    """Show unread entries one by one, asking before each next one."""
    if not sys.stdout.isatty():
        print_warning("interactive mode is not available. `newscheck read` without arguments "
                      "is meant to be used interactively only.")
        raise OSError("not a TTY")
    read_list = ReadList.load(conf.read_list_path, conf.overwrite)
    unread = read_list.unread(entries)
    for position, entry in enumerate(unread):
        _show(entry, conf)
        read_list.add(entry)
        if position + 1 < len(unread):
            if not prompt("Read next news item? (y/n) "):
                break
        else:
            print("All unread news items have been read.")
    read_list.save(conf.read_list_path)


def _run(args: argparse.Namespace) -> None:
    if args.subcommand == "completions":
        sys.stdout.write(completion_script(args.shell))
        return

    pager = args.pager if args.pager is not None else os.environ.get("NEWSCHECK_PAGER")
    conf = Config(
        endpoint=args.url,
        raw=args.raw,
        read_list_path=args.readlist_path,
        overwrite=args.clear_readlist,
        pager=pager,
        hook=bool(is_under_pacman()) or args.debug_pacman,
    )
    try:
        news = feed.entries(conf.endpoint)
    except FeedError:
        # A hook must not block the upgrade just because the feed is unreachable.
        if not conf.hook:
            raise
        print_pacman("failed to fetch news feed, proceeding anyway")
        news = []
    if not news:
        message = "doing nothing because there are no news items found"
        (print_pacman if conf.hook else print_warning)(message)
        return

    if args.subcommand == "list":
        list_entries(news, conf, args.reverse, args.only_unread)
    elif args.subcommand == "check":
        check_entries(news, conf)
    elif args.all:
        mark_all_read(news, conf)
    elif args.num_item is not None:
        read_entries(news, args.num_item, conf)
    else:
        read_all_unread(news, conf)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    args = build_parser().parse_args(argv)
    try:
        _run(args)
    except Blocked:
        return 1
    except (FeedError, OSError, IndexError) as exc:
        print_error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())