"""Plain-text digest of an extracted document, sent to the summarizer."""

from pagescope.constants import (
    DIGEST_MAX_LIST_ITEMS,
    DIGEST_MAX_LISTS,
    DIGEST_MAX_TABLE_ROWS,
    DIGEST_MAX_TABLES,
    MAX_DIGEST_CHARS,
)
from pagescope.models.scrape_models import ExtractedDocument, ListBlock, Table
from pagescope.services.html_extractor import normalize_text


def format_tables(
    tables: list[Table],
    max_tables: int = DIGEST_MAX_TABLES,
    max_rows: int = DIGEST_MAX_TABLE_ROWS,
) -> str:
    """Render tables as ``Table N (caption: ...):`` blocks with pipe-joined rows."""
    lines: list[str] = []

    for index, table in enumerate(tables[:max_tables], start=1):
        caption = normalize_text(table.caption)
        headers = [h for h in (normalize_text(h) for h in table.headers) if h]

        lines.append(f"Table {index}{f' (caption: {caption})' if caption else ''}:")
        if headers:
            lines.append(f"- headers: {' | '.join(headers)}")

        shown = table.rows[:max_rows]
        for row_index, row in enumerate(shown, start=1):
            cells = [c for c in (normalize_text(c) for c in row) if c]
            if cells:
                lines.append(f"- row {row_index}: {' | '.join(cells)}")
        if len(table.rows) > len(shown):
            lines.append(f"- … ({len(table.rows) - len(shown)} more rows)")

    if len(tables) > max_tables:
        lines.append(f"… ({len(tables) - max_tables} more tables)")
    return "\n".join(lines)


def format_lists(
    lists: list[ListBlock],
    max_lists: int = DIGEST_MAX_LISTS,
    max_items: int = DIGEST_MAX_LIST_ITEMS,
) -> str:
    """Render lists as ``List N (ordered):`` blocks with dashed items."""
    lines: list[str] = []

    for index, block in enumerate(lists[:max_lists], start=1):
        items = [i for i in (normalize_text(i) for i in block.items) if i]
        lines.append(f"List {index} ({block.type}):")
        shown = items[:max_items]
        lines.extend(f"- {item}" for item in shown)
        if len(items) > len(shown):
            lines.append(f"- … ({len(items) - len(shown)} more items)")

    if len(lists) > max_lists:
        lines.append(f"… ({len(lists) - max_lists} more lists)")
    return "\n".join(lines)


def build_digest(
    document: ExtractedDocument, url: str, max_chars: int = MAX_DIGEST_CHARS
) -> str:
    """Title, URL, description, paragraphs, tables and lists, truncated."""
    paragraphs = "\n".join(document.paragraphs)
    tables = format_tables(document.tables) or "None"
    lists = format_lists(document.lists) or "None"

    digest = (
        f"Title: {document.title}\n"
        f"URL: {url}\n"
        f"Description: {document.description}\n"
        "\n"
        "Text (paragraphs):\n"
        f"{paragraphs}\n"
        "\n"
        "Tables:\n"
        f"{tables}\n"
        "\n"
        "Lists:\n"
        f"{lists}"
    )
    return digest.strip()[:max_chars]
