"""Allow-list HTML sanitizer for configured markup."""

import re
from collections.abc import Iterable

from bs4 import BeautifulSoup, Comment

# Tags to completely remove (including content)
REMOVE_TAGS = frozenset(
    [
        "script",
        "style",
        "noscript",
        "iframe",
        "frame",
        "frameset",
        "object",
        "embed",
        "applet",
        "svg",
        "math",
        "template",
        "link",
        "meta",
        "base",
        "form",
        "input",
        "button",
        "select",
        "textarea",
    ]
)

ALLOWED_TAGS = frozenset(
    [
        "a",
        "abbr",
        "article",
        "b",
        "blockquote",
        "br",
        "code",
        "del",
        "div",
        "em",
        "figcaption",
        "figure",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "hr",
        "i",
        "img",
        "ins",
        "li",
        "mark",
        "ol",
        "p",
        "pre",
        "s",
        "section",
        "small",
        "span",
        "strong",
        "sub",
        "sup",
        "table",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "time",
        "tr",
        "u",
        "ul",
    ]
)

GLOBAL_ATTRIBUTES = frozenset(["class", "id", "title", "lang", "dir", "role"])

TAG_ATTRIBUTES: dict[str, frozenset[str]] = {
    "a": frozenset(["href", "target", "rel"]),
    "img": frozenset(["src", "alt", "width", "height", "loading"]),
    "td": frozenset(["colspan", "rowspan"]),
    "th": frozenset(["colspan", "rowspan", "scope"]),
    "time": frozenset(["datetime"]),
    "ol": frozenset(["start", "reversed"]),
}

URL_ATTRIBUTES = frozenset(["href", "src"])
SAFE_URL_SCHEMES = frozenset(["http", "https", "mailto", "tel"])

# data-* and aria-* pass on every allowed tag
PREFIXED_ATTRIBUTE = re.compile(r"^(data|aria)-[a-z0-9_.-]+$")
SCHEME_PATTERN = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):")
CONTROL_CHARS = re.compile(r"[\x00-\x20\x7f]+")


def is_safe_url(url: str) -> bool:
    """Allow relative, fragment and http(s)/mailto/tel URLs only."""
    # Browsers ignore embedded whitespace/control chars when parsing schemes
    compact = CONTROL_CHARS.sub("", url)
    match = SCHEME_PATTERN.match(compact)
    if not match:
        return True
    return match.group(1).lower() in SAFE_URL_SCHEMES


class HTMLSanitizer:
    """Strip everything outside an allow-list of tags and attributes.

    Disallowed tags are unwrapped (their text is kept) unless they belong to
    REMOVE_TAGS, in which case the whole subtree goes. Event handler
    attributes, inline styles and unsafe URLs are always dropped.
    """

    def __init__(
        self,
        allowed_tags: Iterable[str] = ALLOWED_TAGS,
        tag_attributes: dict[str, frozenset[str]] | None = None,
    ):
        self.allowed_tags = frozenset(allowed_tags)
        self.tag_attributes = TAG_ATTRIBUTES if tag_attributes is None else tag_attributes

    def _attribute_allowed(self, tag_name: str, attr: str) -> bool:
        attr = attr.lower()
        if attr.startswith("on"):
            return False
        if attr in GLOBAL_ATTRIBUTES or PREFIXED_ATTRIBUTE.match(attr):
            return True
        return attr in self.tag_attributes.get(tag_name, frozenset())

    def clean(self, markup: str) -> str:
        if not markup:
            return ""

        soup = BeautifulSoup(markup, "html.parser")

        for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()

        for tag in soup.find_all(REMOVE_TAGS):
            if not tag.decomposed:
                tag.decompose()

        for tag in soup.find_all(True):
            if tag.name not in self.allowed_tags:
                tag.unwrap()
                continue

            attrs = {}
            for attr, value in tag.attrs.items():
                if not self._attribute_allowed(tag.name, attr):
                    continue
                if attr.lower() in URL_ATTRIBUTES:
                    text = value if isinstance(value, str) else " ".join(value)
                    if not is_safe_url(text):
                        continue
                attrs[attr] = value
            tag.attrs = attrs

            if tag.name == "a" and attrs.get("target") == "_blank":
                tag["rel"] = "noopener noreferrer"

        return str(soup)


_default_sanitizer = HTMLSanitizer()


def sanitize_html(markup: str) -> str:
    """Sanitize markup with the default allow-list."""
    return _default_sanitizer.clean(markup)
