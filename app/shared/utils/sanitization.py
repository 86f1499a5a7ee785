"""Plain-text sanitization for user-entered prose (titles, descriptions, comments)."""

import html

import nh3


def strip_markup(value: str | None) -> str | None:
    """Remove HTML tags with nh3 and return unescaped plain text.

    script/style elements are dropped with their content; other tags are
    unwrapped. Output is stored as plain text, escaping is left to clients.
    """
    if not value:
        return value
    return html.unescape(nh3.clean(value, tags=set(), attributes={}))


# Formatting the draft editor emits; everything else is unwrapped or dropped.
RICH_TEXT_TAGS: frozenset[str] = frozenset({
    "p", "br", "h1", "h2", "h3", "h4", "strong", "b", "em", "i", "u", "s",
    "sub", "sup", "blockquote", "ul", "ol", "li", "a", "span",
    "table", "thead", "tbody", "tr", "th", "td",
})
RICH_TEXT_ATTRIBUTES: dict[str, set[str]] = {
    "a": {"href", "title"},
    "td": {"colspan", "rowspan"},
    "th": {"colspan", "rowspan"},
}


def clean_rich_text(value: str | None) -> str | None:
    """Keep editor formatting tags and drop scripts, handlers and unknown markup."""
    if not value:
        return value
    return nh3.clean(
        value,
        tags=set(RICH_TEXT_TAGS),
        attributes={tag: set(attrs) for tag, attrs in RICH_TEXT_ATTRIBUTES.items()},
        url_schemes={"http", "https", "mailto"},
    )
