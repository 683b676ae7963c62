"""Entry tree describing the hierarchy of pages in a book.

Entries are parsed from ``dokapi.json`` once, receive their keys from
:func:`assign_keys`, and are then wired together by :class:`EntryTree`: every
entry learns its ``parent`` and, over the visible (non-hidden) subsequence,
its ``previous`` and ``next`` neighbours. A synthetic root entry with the key
``""`` always comes first.

Example
-------
>>> from dokapi.entries import Entry, EntryTree, assign_keys
>>> main = Entry(name="Intro", key="", content="intro.md")
>>> index = [Entry(name="Getting Started", content="start.md")]
>>> assign_keys(index)
>>> tree = EntryTree(main, index)
>>> [entry.key for entry, _parent in tree.walk()]
['', 'getting-started']
>>> tree.entries[0].previous.key
''
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from .errors import DuplicateEntryKeyError

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


@dc.dataclass(slots=True, eq=False)
class Entry:
    """One page of the book.

    Attributes
    ----------
    name : str
        Display title.
    key : str or None
        Unique slug; derived from ``name`` when omitted in the config.
    content : str or None
        Markdown path relative to the content root. ``None`` for section
        headers that only aggregate children.
    hidden : bool
        Hidden entries are rendered but left out of menus and navigation.
    children : list[Entry]
        Ordered sub-entries (one nesting level).
    """

    name: str
    key: str | None = None
    content: str | None = None
    hidden: bool = False
    children: list[Entry] = dc.field(default_factory=list)
    parent: Entry | None = dc.field(default=None, repr=False)
    previous: Entry | None = dc.field(default=None, repr=False)
    next: Entry | None = dc.field(default=None, repr=False)

    @property
    def title(self) -> str:
        """Return the page title, prefixed with the parent's name when nested."""
        if self.parent is not None:
            return f"{self.parent.name}: {self.name}"
        return self.name


def slugify(name: str) -> str:
    """Lowercase ``name`` and collapse non-alphanumeric runs into ``-``."""
    return SLUG_PATTERN.sub("-", name.lower())


def assign_keys(index: list[Entry], *, reserved: typ.Iterable[str] = ("",)) -> None:
    """Give every entry a key and make sure keys are unique.

    Parameters
    ----------
    index : list[Entry]
        Top-level entries; their children are processed too.
    reserved : Iterable[str], optional
        Keys already taken, by default the root entry's ``""``.

    Raises
    ------
    DuplicateEntryKeyError
        If two entries (or an entry and a reserved key) share a key.
    """
    keys = set(reserved)

    def _ensure(entry: Entry) -> None:
        if entry.key is None:
            entry.key = slugify(entry.name)
        if entry.key in keys:
            msg = f"Duplicate entry key in index: {entry.key}"
            raise DuplicateEntryKeyError(msg)
        keys.add(entry.key)

    for entry in index:
        _ensure(entry)
        for child in entry.children:
            _ensure(child)


class EntryTree:
    """Index of every entry with parent and sibling links resolved."""

    def __init__(
        self, main: Entry, entries: list[Entry], *, main_label: str | None = None
    ) -> None:
        self.main = main
        self.main_label = main_label or main.name
        self.entries = entries
        self.keys: set[str] = set()
        self._by_key: dict[str, Entry] = {}
        self._link()

    def walk(self) -> typ.Iterator[tuple[Entry, Entry | None]]:
        """Yield ``(entry, parent)`` pairs, root first, children after parents."""
        yield self.main, None
        for entry in self.entries:
            yield entry, None
            for child in entry.children:
                yield child, entry

    def __iter__(self) -> typ.Iterator[Entry]:
        return (entry for entry, _parent in self.walk())

    def visible(self) -> list[Entry]:
        """Return the non-hidden entries in traversal order."""
        return [entry for entry in self if not entry.hidden]

    def get(self, key: str) -> Entry:
        """Return the entry registered under ``key``."""
        return self._by_key[key]

    def markdown_menu(self, *, numbering: bool = False) -> str:
        """Render the main menu as a Markdown list of root-relative links."""
        bullet = _bullet(numbering)
        lines = [f"{bullet} [{self.main_label}](/)"]
        for entry in self.entries:
            if entry.hidden:
                continue
            lines.append(f"{bullet} [{entry.name}](/{entry.key})")
            lines.extend(
                f"    {bullet} [{child.name}](/{child.key})"
                for child in entry.children
                if not child.hidden
            )
        return "\n".join(lines) + "\n"

    @staticmethod
    def markdown_index(children: list[Entry], *, numbering: bool = False) -> str:
        """Render a Markdown list linking to each of ``children``."""
        bullet = _bullet(numbering)
        items = "".join(
            f"\n{bullet} [{child.name}](/{child.key})" for child in children
        )
        return items + "\n"

    def _link(self) -> None:
        previous: Entry | None = None
        for entry, parent in self.walk():
            key = entry.key or ""
            self.keys.add(key)
            self._by_key[key] = entry
            if parent is not None:
                entry.parent = parent
                entry.hidden = entry.hidden or parent.hidden
            if entry.hidden:
                continue
            if previous is not None:
                entry.previous = previous
                previous.next = entry
            previous = entry


def _bullet(numbering: bool) -> str:
    return "1." if numbering else "-"


__all__ = ["Entry", "EntryTree", "assign_keys", "slugify"]
