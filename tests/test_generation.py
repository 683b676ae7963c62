"""End-to-end tests for site and single-page generation.

Each test writes a small book with the ``make_book`` fixture, runs
:meth:`dokapi.book.DokapiBook.generate`, and inspects the written HTML with
BeautifulSoup.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from dokapi.book import DokapiBook
from dokapi.errors import (
    BookConfigError,
    BrokenLinkError,
    DuplicateEntryKeyError,
    IntegrityError,
    MissingFileError,
    OrphanContentError,
    UnexpectedLinkError,
)

if typ.TYPE_CHECKING:
    from .conftest import BookFactory


def _soup(path: Path) -> BeautifulSoup:
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


@pytest.fixture
def site(make_book: BookFactory, tmp_path: Path) -> Path:
    """Generate the default book as a website and return the site directory."""
    DokapiBook.parse(make_book()).generate("site", tmp_path / "out")
    return tmp_path / "out" / "site"


@pytest.fixture
def page(make_book: BookFactory, tmp_path: Path) -> BeautifulSoup:
    """Generate the default book as a single page and return the parsed page."""
    DokapiBook.parse(make_book()).generate("page", tmp_path / "out")
    return _soup(tmp_path / "out" / "page" / "index.html")


def test_site_writes_one_directory_per_entry(site: Path) -> None:
    written = sorted(
        str(path.relative_to(site)) for path in site.rglob("index.html")
    )

    assert written == [
        "getting-started/index.html",
        "guides/index.html",
        "index.html",
        "secret/index.html",
        "setup/index.html",
    ]
    assert (site / "assets" / "style.css").is_file()


def test_site_root_relative_paths(site: Path) -> None:
    root = _soup(site / "index.html")
    nested = _soup(site / "setup" / "index.html")

    assert root.select_one("link")["href"] == "./assets/style.css"
    assert nested.select_one("link")["href"] == "../assets/style.css"
    assert nested.select_one("main a[href='../']").get_text() == "the intro"


def test_site_titles_and_current_menu_link(site: Path) -> None:
    soup = _soup(site / "setup" / "index.html")

    assert soup.title.get_text() == "Guides: Setup"
    current = soup.select("#menu a.current")
    assert [link.get_text() for link in current] == ["Setup"]


def test_site_menu_skips_hidden_entries(site: Path) -> None:
    soup = _soup(site / "index.html")

    labels = [link.get_text() for link in soup.select("#menu a")]

    assert labels == ["Intro", "Getting Started", "Guides", "Setup"]


def test_site_previous_next_navigation(site: Path) -> None:
    root = _soup(site / "index.html")
    setup = _soup(site / "setup" / "index.html")

    assert "disabledLink" in root.select_one("footer a.previous")["class"]
    assert root.select_one("footer a.next")["href"] == "./getting-started"
    assert setup.select_one("footer a.previous")["href"] == "../guides"
    assert "disabledLink" in setup.select_one("footer a.next")["class"]


def test_site_section_without_content_lists_children(site: Path) -> None:
    soup = _soup(site / "guides" / "index.html")

    links = [(a.get_text(), a["href"]) for a in soup.select("main a")]

    assert links == [("Setup", "../setup"), ("Secret", "../secret")]


def test_site_rewrites_internal_links_and_expands_variables(site: Path) -> None:
    soup = _soup(site / "getting-started" / "index.html")
    main = soup.select_one("main")

    assert "Install version 1.2.3." in main.get_text()
    hrefs = [a["href"] for a in main.select("p a")]
    assert hrefs == ["../setup/#configure", "../getting-started/#install-steps"]
    heading = main.select_one("h2.header a.deep-link")
    assert heading["id"] == "install-steps"


def test_site_external_links_to_blank(make_book: BookFactory, tmp_path: Path) -> None:
    root = make_book(
        config={"externalLinksToBlank": True, "index": []},
        content={"intro.md": "Visit [us](https://example.com).\n"},
    )

    DokapiBook.parse(root).generate("site", tmp_path / "out")

    link = _soup(tmp_path / "out" / "site" / "index.html").select_one("main a")
    assert link["target"] == "_blank"
    assert link["rel"] == ["noopener", "noreferrer"]
    assert "external" in link["class"]


def test_site_images_are_copied(make_book: BookFactory, tmp_path: Path) -> None:
    root = make_book(content={"intro.md": "![Logo](logo.png)\n"}, config={"index": []})
    (root / "content" / "logo.png").write_bytes(b"\x89PNG")

    DokapiBook.parse(root).generate("site", tmp_path / "out")

    site = tmp_path / "out" / "site"
    assert (site / "images" / "__logo.png").read_bytes() == b"\x89PNG"
    assert _soup(site / "index.html").select_one("main img")["src"] == (
        "./images/__logo.png"
    )


def test_site_file_inclusion_in_content(make_book: BookFactory, tmp_path: Path) -> None:
    root = make_book(
        content={"intro.md": "Example:\n{{file:example.py}}\n"}, config={"index": []}
    )
    (root / "content" / "example.py").write_text("print('hi')\n", encoding="utf-8")

    DokapiBook.parse(root).generate("site", tmp_path / "out")

    soup = _soup(tmp_path / "out" / "site" / "index.html")
    block = soup.select_one("div.codehilite")
    assert block["data-language"] == "py"
    assert "print" in block.get_text()


def test_regeneration_replaces_previous_output(
    make_book: BookFactory, tmp_path: Path
) -> None:
    book = DokapiBook.parse(make_book())
    book.generate("site", tmp_path / "out")
    stale = tmp_path / "out" / "site" / "stale.html"
    stale.write_text("old", encoding="utf-8")

    DokapiBook.parse(make_book()).generate("site", tmp_path / "out")

    assert not stale.exists()


def test_page_contains_visible_entries_with_content(page: BeautifulSoup) -> None:
    anchors = [a["id"] for a in page.select("h1 > a[id$='__']")]

    assert anchors == ["__", "getting-started__", "setup__"]


def test_page_scopes_links_and_heading_anchors(page: BeautifulSoup) -> None:
    hrefs = {a.get_text(): a["href"] for a in page.select("p a")}

    assert hrefs["the start"] == "#getting-started__"
    assert hrefs["setup"] == "#setup__configure"
    assert hrefs["below"] == "#getting-started__install-steps"
    assert hrefs["the intro"] == "#__"
    ids = [a["id"] for a in page.select("a.deep-link")]
    assert "setup__configure" in ids
    assert "getting-started__install-steps" in ids


def test_page_menu_points_at_entry_anchors(page: BeautifulSoup) -> None:
    hrefs = [a["href"] for a in page.select("#menu a")]

    assert hrefs == ["#__", "#getting-started__", "#guides__", "#setup__"]


def test_page_template_requires_body_placeholder(
    make_book: BookFactory, tmp_path: Path
) -> None:
    root = make_book(files={"templates/page.html": "<html>{{menu}}</html>"})

    with pytest.raises(BookConfigError, match="placeholder"):
        DokapiBook.parse(root).generate("page", tmp_path / "out")


def test_unknown_output_type(make_book: BookFactory, tmp_path: Path) -> None:
    with pytest.raises(BookConfigError, match="Unknown output type: pdf"):
        DokapiBook.parse(make_book()).generate("pdf", tmp_path / "out")


def test_broken_internal_link_aborts(make_book: BookFactory, tmp_path: Path) -> None:
    root = make_book(content={"intro.md": "[gone](/nowhere)\n"}, config={"index": []})

    with pytest.raises(BrokenLinkError, match='to "nowhere"'):
        DokapiBook.parse(root).generate("site", tmp_path / "out")


def test_relative_markdown_link_is_unexpected(
    make_book: BookFactory, tmp_path: Path
) -> None:
    root = make_book(content={"intro.md": "[other](other.html)\n"}, config={"index": []})

    with pytest.raises(UnexpectedLinkError):
        DokapiBook.parse(root).generate("site", tmp_path / "out")


def test_undefined_reference_fails_integrity(
    make_book: BookFactory, tmp_path: Path
) -> None:
    root = make_book(content={"intro.md": "{{undefined.key}}\n"}, config={"index": []})

    with pytest.raises(IntegrityError, match='Reference "undefined.key"'):
        DokapiBook.parse(root).generate("site", tmp_path / "out")


def test_orphan_markdown_is_rejected(make_book: BookFactory) -> None:
    root = make_book(files={"content/forgotten.md": "# Lost\n"})

    with pytest.raises(OrphanContentError, match="forgotten.md"):
        DokapiBook.parse(root)


def test_duplicate_entry_keys_are_rejected(make_book: BookFactory) -> None:
    index = [
        {"name": "Setup", "content": "getting-started.md"},
        {"name": "Other", "key": "setup", "content": "guides/setup.md"},
    ]
    root = make_book(
        config={"index": index},
        content={"intro.md": "x", "getting-started.md": "y", "guides/setup.md": "z"},
    )

    with pytest.raises(DuplicateEntryKeyError):
        DokapiBook.parse(root)


def test_missing_content_is_reported(make_book: BookFactory, tmp_path: Path) -> None:
    index = [{"name": "Later", "content": "later.md"}]
    root = make_book(content={"intro.md": "x"}, config={"index": index})

    with pytest.raises(MissingFileError, match="later.md"):
        DokapiBook.parse(root).generate("site", tmp_path / "out")


def test_create_missing_writes_placeholders(
    make_book: BookFactory, tmp_path: Path
) -> None:
    index = [{"name": "Later", "content": "drafts/later.md"}]
    root = make_book(content={"intro.md": "x"}, config={"index": index})

    DokapiBook.parse(root).generate("site", tmp_path / "out", create_missing=True)

    placeholder = root / "content" / "drafts" / "later.md"
    assert placeholder.read_text(encoding="utf-8") == "<!-- todo: later.md -->"
    assert (tmp_path / "out" / "site" / "later" / "index.html").is_file()


def test_local_project_variables(make_book: BookFactory, tmp_path: Path) -> None:
    project = tmp_path / "widgets"
    project.mkdir()
    (project / "package.json").write_text('{"version": "4.5.6"}', encoding="utf-8")
    (project / "index.js").write_text(
        "/**\n * @dokapi widget.doc\n * A **bold** widget.\n */\n", encoding="utf-8"
    )
    root = make_book(
        config={"project": "../widgets", "index": []},
        content={"intro.md": "v{{package.version}} of {{config.name}}\n\n{{widget.doc}}\n"},
    )

    DokapiBook.parse(root).generate("site", tmp_path / "out")

    main = _soup(tmp_path / "out" / "site" / "index.html").select_one("main")
    assert "v4.5.6 of Demo Book" in main.get_text()
    assert main.select_one("strong").get_text() == "bold"


def test_site_root_page_is_titled_with_book_name(site: Path) -> None:
    soup = _soup(site / "index.html")

    assert soup.title.get_text() == "Demo Book"
    assert soup.select_one("#menu a").get_text() == "Intro"


def test_site_accepts_autolinked_email(make_book: BookFactory, tmp_path: Path) -> None:
    root = make_book(
        content={"intro.md": "Contact <team@example.com>.\n"}, config={"index": []}
    )

    DokapiBook.parse(root).generate("site", tmp_path / "out")

    link = _soup(tmp_path / "out" / "site" / "index.html").select_one("main a")
    assert link["href"] == "mailto:team@example.com"


def test_page_accepts_underscores_in_heading_anchors(
    make_book: BookFactory, tmp_path: Path
) -> None:
    root = make_book(
        content={"intro.md": "# Intro\n\n## The `__init__` method\n\nDetails.\n"},
        config={"index": []},
    )

    DokapiBook.parse(root).generate("page", tmp_path / "out")

    soup = _soup(tmp_path / "out" / "page" / "index.html")
    anchor = soup.find("a", id="__the-__init__-method")
    assert anchor is not None
    assert anchor["href"] == "#__the-__init__-method"


def test_entry_menu_is_expanded_as_markdown(
    make_book: BookFactory, tmp_path: Path
) -> None:
    index = [
        {
            "name": "Guides",
            "content": "guides/index.md",
            "children": [{"name": "Setup", "content": "guides/setup.md"}],
        }
    ]
    root = make_book(
        config={"index": index},
        content={
            "intro.md": "# Intro\n",
            "guides/index.md": "# Guides\n\nPick one:\n\n{{entry.menu}}\n",
            "guides/setup.md": "# Setup\n",
        },
    )

    DokapiBook.parse(root).generate("site", tmp_path / "out")

    soup = _soup(tmp_path / "out" / "site" / "guides" / "index.html")
    links = [(a.get_text(), a["href"]) for a in soup.select("main li a")]
    assert links == [("Setup", "../setup")]


def test_undecodable_content_is_reported(make_book: BookFactory, tmp_path: Path) -> None:
    root = make_book(config={"index": []}, content={"intro.md": ""})
    (root / "content" / "intro.md").write_bytes(b"\xff\xfe")

    with pytest.raises(MissingFileError, match="intro.md"):
        DokapiBook.parse(root).generate("site", tmp_path / "out")
