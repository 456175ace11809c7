from __future__ import annotations

import html
import re
from typing import Any, Iterable, List


def clean_text(text: str | None) -> str:
    """Clean description-style text before it is embedded.

    - Decode HTML entities (e.g. &amp; -> &)
    - Strip HTML tags while keeping inner text
    - Simplify Markdown links, headings and bold markers
    - Normalize whitespace
    """

    if not text:
        return ""

    text = html.unescape(str(text))

    # <a href="...">text</a> -> text
    text = re.sub(r"<[^>]+>", "", text)

    # [Text](url) -> Text
    text = re.sub(r"\[([^\]]+)\]\([^\)]+\)", r"\1", text)

    # **Text** / __Text__ -> Text; single underscores are left alone (snake_case names)
    text = re.sub(r"(\*\*|__)(.+?)\1", r"\2", text)

    # "## Heading" -> "Heading"
    text = re.sub(r"(^|\n)\s*#{1,6}\s+", r"\1", text)

    text = re.sub(r"\s+", " ", text)

    return text.strip()


def clean_list(value: Any) -> List[str]:
    """Normalize an array-ish metadata value (tags, regions) to a list of strings.

    - None, "", "N/A" and similar become []
    - A plain string is split on semicolons or commas
    - Items are stripped, empties and duplicates dropped (order kept)
    """

    if value is None:
        return []

    if isinstance(value, (list, tuple, set)):
        raw_items = [str(v) for v in value if v is not None]
    else:
        raw = str(value).strip()
        if not raw or raw.upper() in {"N_A", "N/A", "NONE"}:
            return []
        raw_items = re.split(r"[;,]", raw)

    seen = set()
    items: List[str] = []
    for item in raw_items:
        item = item.strip()
        if item and item not in seen:
            seen.add(item)
            items.append(item)
    return items


def join_text(parts: Iterable[Any], sep: str = ". ") -> str:
    """Clean each part and join the non-empty ones with ``sep``."""
    cleaned = [clean_text(p) for p in parts if p is not None]
    return sep.join(p for p in cleaned if p)
