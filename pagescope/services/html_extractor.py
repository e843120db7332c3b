"""HTML to structured document extraction.

``extract_document`` is a pure, deterministic transform from raw HTML and the
URL it came from to an ``ExtractedDocument``. Every collection it produces is
capped independently (see ``pagescope.constants``), so adversarial or
malformed markup cannot blow up the output size.

DOM access goes through ``HtmlQuery``, a thin facade over BeautifulSoup that
exposes only what the extractors need: selector queries, attribute lookup,
text and markup.
"""

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from pagescope.constants import (
    DESCRIPTION_FALLBACK_CHARS,
    MAX_COMPONENT_CONTENT_CHARS,
    MAX_IMAGES,
    MAX_LINKS,
    MAX_LIST_ITEMS,
    MAX_LISTS,
    MAX_TABLE_COLS,
    MAX_TABLE_ROWS,
    MAX_TABLES,
    MAX_UNIQUE_COMPONENTS,
    MIN_PARAGRAPH_CHARS,
    NO_TITLE_PLACEHOLDER,
)
from pagescope.models.scrape_models import (
    Component,
    ExtractedDocument,
    Link,
    ListBlock,
    Table,
)
from pagescope.services.tech_stack import detect_tech_stack

_WHITESPACE_RE = re.compile(r"\s+")

# Elements reported as unique components, in selector order
COMPONENT_SELECTORS = (
    # Text structure
    "h1", "h2", "h3", "h4", "h5", "h6",
    "blockquote",
    "pre",
    "code",
    # Forms/inputs
    "form",
    "button",
    "input",
    "select",
    "textarea",
    # Layout/semantic
    "header",
    "nav",
    "main",
    "section",
    "article",
    "aside",
    "footer",
    # Embeds/media (img is covered by images)
    "iframe",
    "video",
    "audio",
)

# Attributes summarized after a component's content
COMPONENT_SUMMARY_ATTRS = (
    "type",
    "name",
    "id",
    "placeholder",
    "value",
    "aria-label",
    "role",
    "title",
)

# Attributes used as content when an element has no text
COMPONENT_LABEL_ATTRS = ("aria-label", "placeholder", "title")

_SKIPPED_HREF_PREFIXES = ("#", "javascript:")


def normalize_text(value: str | None) -> str:
    """Collapse whitespace runs to one space and trim."""
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value)).strip()


class HtmlQuery:
    """Selector-based read access to a parsed HTML document."""

    def __init__(self, html: str):
        self._soup = BeautifulSoup(html or "", "lxml")

    def query(self, selector: str, scope: Tag | None = None) -> list[Tag]:
        """All elements matching ``selector``, in document order."""
        return (scope or self._soup).select(selector)

    def first(self, selector: str, scope: Tag | None = None) -> Tag | None:
        return (scope or self._soup).select_one(selector)

    @staticmethod
    def attr(node: Tag, name: str) -> str | None:
        value = node.get(name)
        if isinstance(value, list):
            # Multi-valued attributes such as class come back as lists
            return " ".join(value)
        return value

    @staticmethod
    def text(node: Tag) -> str:
        return node.get_text()

    @staticmethod
    def inner_html(node: Tag) -> str:
        return node.decode_contents()

    @staticmethod
    def tag_name(node: Tag) -> str:
        return (node.name or "").lower()

    def body_text(self) -> str:
        body = self.first("body")
        return self.text(body if body is not None else self._soup)


def _resolve_url(value: str, base_url: str) -> str | None:
    """Absolute form of ``value``; raw value if it already looks absolute."""
    try:
        return urljoin(base_url, value)
    except ValueError:
        return value if value.startswith("http") else None


def _cell_texts(query: HtmlQuery, row: Tag) -> list[str]:
    return [normalize_text(query.text(cell)) for cell in row.find_all(["th", "td"])]


def _extract_tables(query: HtmlQuery) -> list[Table]:
    tables: list[Table] = []

    for table in query.query("table"):
        if len(tables) >= MAX_TABLES:
            break

        caption_node = query.first("caption", table)
        caption = normalize_text(query.text(caption_node)) if caption_node else ""

        # Headers: prefer thead, fall back to a first row made of th cells
        headers: list[str] = []
        header_row: Tag | None = None
        thead_row = query.first("thead tr", table)
        if thead_row is not None and thead_row.find(["th", "td"]) is not None:
            headers = _cell_texts(query, thead_row)[:MAX_TABLE_COLS]
        elif thead_row is None:
            first_row = table.find("tr")
            if first_row is not None and first_row.find("th") is not None:
                header_row = first_row
                headers = _cell_texts(query, first_row)[:MAX_TABLE_COLS]

        rows: list[list[str]] = []
        for tr in table.find_all("tr"):
            if len(rows) >= MAX_TABLE_ROWS:
                break
            if tr is header_row or tr.find_parent(["thead", "tfoot"]) is not None:
                continue
            cells = [c for c in _cell_texts(query, tr)[:MAX_TABLE_COLS] if c]
            if cells:
                rows.append(cells)

        if not headers and not rows:
            continue

        tables.append(
            Table(
                caption=caption,
                headers=headers,
                rows=rows,
                row_count=len(rows),
                col_count=max([len(headers), *(len(r) for r in rows)]),
                html=query.inner_html(table),
            )
        )

    return tables


def _extract_lists(query: HtmlQuery) -> list[ListBlock]:
    lists: list[ListBlock] = []

    for node in query.query("ul, ol"):
        if len(lists) >= MAX_LISTS:
            break

        items: list[str] = []
        for li in node.find_all("li"):
            text = normalize_text(query.text(li))
            if text:
                items.append(text)
                if len(items) >= MAX_LIST_ITEMS:
                    break

        if not items:
            continue

        lists.append(
            ListBlock(
                type="ordered" if query.tag_name(node) == "ol" else "unordered",
                items=items,
                item_count=len(items),
                html=query.inner_html(node),
            )
        )

    return lists


def _summarize_attrs(query: HtmlQuery, node: Tag) -> str:
    parts = []
    for name in COMPONENT_SUMMARY_ATTRS:
        value = normalize_text(query.attr(node, name))
        if value:
            parts.append(f"{name}={value}")
    return " | ".join(parts)


def _extract_unique_components(query: HtmlQuery) -> list[Component]:
    seen: set[tuple[str, str]] = set()
    components: list[Component] = []

    for node in query.query(", ".join(COMPONENT_SELECTORS)):
        if len(components) >= MAX_UNIQUE_COMPONENTS:
            break

        name = query.tag_name(node)
        if name == "input":
            input_type = normalize_text(query.attr(node, "type"))
            if input_type:
                name = f"input[type={input_type}]"

        content = normalize_text(query.text(node))
        for attr in COMPONENT_LABEL_ATTRS:
            if content:
                break
            content = normalize_text(query.attr(node, attr))
        summary = _summarize_attrs(query, node)
        if summary:
            content = f"{content} ({summary})" if content else summary

        content = content[:MAX_COMPONENT_CONTENT_CHARS]
        if not content:
            continue

        key = (name, content)
        if key in seen:
            continue
        seen.add(key)
        components.append(Component(name=name, content=content))

    return components


def _extract_images(query: HtmlQuery, base_url: str) -> list[str]:
    images: list[str] = []
    for img in query.query("img"):
        if len(images) >= MAX_IMAGES:
            break
        src = (query.attr(img, "src") or query.attr(img, "data-src") or "").strip()
        if not src:
            continue
        resolved = _resolve_url(src, base_url)
        if resolved:
            images.append(resolved)
    return images


def _extract_links(query: HtmlQuery, base_url: str) -> list[Link]:
    links: list[Link] = []
    for anchor in query.query("a"):
        if len(links) >= MAX_LINKS:
            break
        href = (query.attr(anchor, "href") or "").strip()
        if not href or href.lower().startswith(_SKIPPED_HREF_PREFIXES):
            continue
        resolved = _resolve_url(href, base_url)
        if resolved:
            text = normalize_text(query.text(anchor))
            links.append(Link(url=resolved, text=text or href))
    return links


def _extract_title(query: HtmlQuery) -> str:
    for selector in ("head title", "title", "h1"):
        node = query.first(selector)
        if node is not None:
            title = normalize_text(query.text(node))
            if title:
                return title
    return NO_TITLE_PLACEHOLDER


def _extract_description(query: HtmlQuery) -> str:
    for selector in ('meta[name="description"]', 'meta[property="og:description"]'):
        node = query.first(selector)
        if node is not None:
            content = normalize_text(query.attr(node, "content"))
            if content:
                return content

    first_paragraph = query.first("p")
    if first_paragraph is not None:
        return normalize_text(query.text(first_paragraph))[:DESCRIPTION_FALLBACK_CHARS]
    return ""


def extract_document(html: str, base_url: str) -> ExtractedDocument:
    """Parse ``html`` fetched from ``base_url`` into a structured document.

    Args:
        html: Raw HTML, possibly malformed
        base_url: URL used to resolve relative image and link references

    Returns:
        ExtractedDocument with bounded collections and the internal body text
        length used by the classifier
    """
    query = HtmlQuery(html)

    paragraphs = [
        text
        for text in (normalize_text(query.text(p)) for p in query.query("p"))
        if len(text) >= MIN_PARAGRAPH_CHARS
    ]

    return ExtractedDocument(
        title=_extract_title(query),
        description=_extract_description(query),
        paragraphs=paragraphs,
        images=_extract_images(query, base_url),
        links=_extract_links(query, base_url),
        tables=_extract_tables(query),
        lists=_extract_lists(query),
        unique_components=_extract_unique_components(query),
        tech_stack=detect_tech_stack(html, base_url),
        body_text_length=len(query.body_text().strip()),
        raw_html=html or "",
    )
