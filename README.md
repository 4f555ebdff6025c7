# newscheck

Another Arch Linux news reader. `newscheck` fetches the Arch Linux news RSS
feed, remembers which items you have already read, and, when run as a pacman
hook, stops an upgrade until unread news has been read.

## Installation

```
pip install .
```

This installs the `newscheck` command.

## Usage

```
newscheck list              # list the most recent news items, numbered from 0
newscheck list --reverse    # the same list in reverse order
newscheck list --unread     # only items you have not read yet
newscheck check             # report unread news items
newscheck read 0            # show item number 0 and mark it read
newscheck read              # step through all unread items interactively
newscheck read --all        # mark every item as read without printing
newscheck --version         # print the version
```

`newscheck check` prints a message when there is nothing unread. With exactly
one unread item it prints that item and marks it read; with several it tells
you how many there are and suggests `newscheck read`.

`newscheck read` without an item number only works when standard output is a
terminal. It shows each unread item in turn and asks `Read next news item?
(y/n)` before the next one; an empty answer counts as yes.

Item bodies are HTML; by default they are rendered as plain text wrapped to
the terminal width, with links listed as numbered footnotes.

Options accepted before or after any subcommand:

- `-r`, `--raw`: print the raw HTML of an item instead of formatted text
- `-f`, `--file PATH`: path of the read list (default `/var/lib/newscheck/data`)
- `--url URL`: news feed to read (default `https://archlinux.org/feeds/news/`)
- `--clear-readlist`: empty the read list before doing anything else
- `-p`, `--pager CMD`: show news items through a pager such as `less`

When `--pager` is not given, the `NEWSCHECK_PAGER` environment variable is
used if it is set. If the pager cannot be found or started, the item is
printed directly instead.

If the feed holds no items, `newscheck` prints a warning and does nothing.

## Running as a pacman hook

When the parent process is `pacman`, `newscheck` behaves as a hook:

- `newscheck check` with a single unread item prints it, marks it read and
  stops the upgrade once; re-running the upgrade then proceeds;
- `newscheck check` with several unread items stops the upgrade until you run
  `newscheck read`;
- if the feed cannot be fetched, the upgrade proceeds anyway.

The command exits with status 1 whenever it blocks an upgrade or fails, and
0 otherwise.

## Shell completions

Completion scripts are available for bash, zsh and fish:

```
newscheck completions bash > ~/.bash_completion.d/newscheck.bash
newscheck completions zsh > ~/.zsh/site_functions/_newscheck
newscheck completions fish > ~/.config/fish/completions/newscheck.fish
```

## Read list

The read list is a flat file of 16-byte MD5 digests, one per item read, each
computed from the item's title and publication time. It is created empty if
it does not exist. To update it you need write access to the file; when
writing is refused, `newscheck` warns that you must be in the `newscheck`
group.

## Using it from Python

- `newscheck.feed.entries(url)` fetches a feed and returns a list of `Entry`
  objects (`title`, `body`, `timestamp` in UTC); `parse_feed(data)` does the
  same for an RSS document already in hand. Both raise `FeedError` on failure.
- `newscheck.read_list.ReadList` loads, updates and saves the read list:
  `ReadList.load(path, overwrite)`, `add(entry)`, `unread(entries)`,
  `save(path)` and `to_bytes()`; `entry in read_list` tells whether an entry
  has been read.
- `newscheck.cli.main(argv)` runs the command line and returns its exit status.