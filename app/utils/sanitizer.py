"""Safe HTML rendering of issue descriptions.

Descriptions are stored exactly as written. When one is shown in a page,
embedded HTML is reduced to a small formatting subset, everything else
is escaped, and bare URLs are turned into safe links.
"""

from functools import partial

from bleach.linkifier import LinkifyFilter
from bleach.sanitizer import Cleaner

DESCRIPTION_TAGS = frozenset({
    "p", "br", "hr", "blockquote",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li",
    "strong", "em", "b", "i", "u", "s", "del",
    "code", "pre", "a",
    "table", "thead", "tbody", "tr", "th", "td",
})

DESCRIPTION_ATTRIBUTES = {
    "a": ["href", "title", "rel", "target"],
    "code": ["class"],
    "pre": ["class"],
    "th": ["align"],
    "td": ["align"],
}

LINK_PROTOCOLS = frozenset({"http", "https", "mailto"})


def _harden_link(attrs: dict, new: bool = False) -> dict:
    href = attrs.get((None, "href"), "")
    attrs[(None, "rel")] = "noopener noreferrer nofollow"
    if href.startswith(("http://", "https://")):
        attrs[(None, "target")] = "_blank"
    return attrs


_cleaner = Cleaner(
    tags=DESCRIPTION_TAGS,
    attributes=DESCRIPTION_ATTRIBUTES,
    protocols=LINK_PROTOCOLS,
    strip=True,
    filters=[partial(LinkifyFilter, callbacks=[_harden_link], skip_tags={"pre", "code"})],
)


def clean_description(text):
    """Return ``text`` as HTML that is safe to embed; empty values pass through."""
    if not text:
        return text
    return _cleaner.clean(text)
