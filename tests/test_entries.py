"""Tests for entry key assignment and tree navigation."""

from __future__ import annotations

import pytest

from dokapi.entries import Entry, EntryTree, assign_keys, slugify
from dokapi.errors import DuplicateEntryKeyError


def _tree() -> EntryTree:
    main = Entry(name="Intro", key="", content="intro.md")
    index = [
        Entry(name="Getting Started", content="start.md"),
        Entry(
            name="Guides",
            children=[
                Entry(name="Setup", content="guides/setup.md"),
                Entry(name="Secret", content="guides/secret.md", hidden=True),
                Entry(name="Deploy", key="ship", content="guides/deploy.md"),
            ],
        ),
        Entry(name="Internals", hidden=True, children=[Entry(name="Core", content="core.md")]),
    ]
    assign_keys(index)
    return EntryTree(main, index)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Getting Started", "getting-started"),
        ("API & Usage!", "api-usage-"),
        ("v2.0 Notes", "v2-0-notes"),
    ],
)
def test_slugify(name: str, expected: str) -> None:
    assert slugify(name) == expected


def test_keys_are_derived_unless_explicit() -> None:
    tree = _tree()

    assert [entry.key for entry in tree] == [
        "",
        "getting-started",
        "guides",
        "setup",
        "secret",
        "ship",
        "internals",
        "core",
    ]


def test_duplicate_keys_are_rejected() -> None:
    index = [Entry(name="Setup", content="a.md"), Entry(name="setup", content="b.md")]

    with pytest.raises(DuplicateEntryKeyError, match="Duplicate entry key in index: setup"):
        assign_keys(index)


def test_child_key_may_not_reuse_parent_key() -> None:
    index = [Entry(name="Guides", children=[Entry(name="x", key="guides", content="g.md")])]

    with pytest.raises(DuplicateEntryKeyError):
        assign_keys(index)


def test_previous_next_chain_skips_hidden_entries() -> None:
    tree = _tree()

    chain = []
    entry: Entry | None = tree.main
    while entry is not None:
        chain.append(entry.key)
        entry = entry.next

    assert chain == ["", "getting-started", "guides", "setup", "ship"]
    assert tree.get("ship").previous is tree.get("setup")
    assert tree.get("secret").previous is None
    assert tree.get("secret").next is None


def test_hidden_parent_hides_children() -> None:
    tree = _tree()

    assert tree.get("core").hidden
    assert tree.get("core") not in tree.visible()


def test_titles_include_parent_name() -> None:
    tree = _tree()

    assert tree.get("setup").title == "Guides: Setup"
    assert tree.get("guides").title == "Guides"


def test_markdown_menu_lists_visible_entries() -> None:
    menu = _tree().markdown_menu()

    assert menu == (
        "- [Intro](/)\n"
        "- [Getting Started](/getting-started)\n"
        "- [Guides](/guides)\n"
        "    - [Setup](/setup)\n"
        "    - [Deploy](/ship)\n"
    )


def test_markdown_menu_numbering() -> None:
    menu = _tree().markdown_menu(numbering=True)

    assert menu.splitlines()[0] == "1. [Intro](/)"
    assert "    1. [Setup](/setup)" in menu


def test_markdown_index_lists_children() -> None:
    tree = _tree()

    index = EntryTree.markdown_index(tree.get("internals").children)

    assert index == "\n- [Core](/core)\n"
