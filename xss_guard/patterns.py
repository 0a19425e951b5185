"""
Catalog of dangerous-content matchers

Each entry is removed (replaced with an empty string) when the catalog is used
for stripping. Entries are applied in order, so an entry only ever sees what
earlier entries left behind. Detection tests every entry against the raw input.

The catalog is a finite list of known vectors and cannot catch every novel
obfuscation. New vectors are added by appending entries, see extend_catalog().
"""
import re
from typing import NamedTuple, Pattern, Tuple

CATALOG_VERSION = "1.0"

FLAGS = re.IGNORECASE | re.DOTALL

# Comments never span the opener of another comment, so a run of unclosed
# openers is scanned once instead of once per opener
COMMENT = r"<!--(?:(?!-->|<!--).)*-->"
CSS_COMMENT = r"/\*(?:(?!\*/|/\*).)*\*/"

# Filler tolerated between the letters of a keyword: whitespace, non-breaking
# space, percent-encoded whitespace, CSS comments and HTML comments. Every
# alternative starts with a different character.
GAP = r"(?:[\s\u00a0]|%(?:0[9ad]|20|a0)|" + CSS_COMMENT + "|" + COMMENT + ")*"

SPACE = r"[\s\u00a0]*"

DANGEROUS_SCHEMES = ("javascript", "jscript", "js", "vbscript", "livescript", "expression")

DANGEROUS_DATA_TYPES = (
    "text/html",
    "text/xml",
    "text/javascript",
    "text/ecmascript",
    "application/xml",
    "application/xhtml+xml",
    "application/javascript",
    "application/x-javascript",
    "application/ecmascript",
    "image/svg+xml",
)

URL_ATTRIBUTES = ("href", "src", "action", "formaction", "srcdoc", "xlink:href")
DATA_ATTRIBUTES = ("href", "src", "srcdoc")


class CatalogEntry(NamedTuple):
    """A single named matcher; its action is always removal"""
    name: str
    category: str
    pattern: Pattern[str]


def spaced(word: str) -> str:
    """Regex matching word with GAP filler allowed between its letters"""
    return GAP.join(re.escape(letter) for letter in word)


def _any_of(*alternatives: str) -> str:
    return "(?:" + "|".join(alternatives) + ")"


def _value_start(names: Tuple[str, ...], quote: str) -> str:
    """
    Zero-width assertion for the start of an attribute value

    Python lookbehinds must be fixed width, so every name and spacing
    combination gets its own lookbehind.
    """
    lookbehinds = []
    for name in names:
        for separator in ("=", " =", "= ", " = "):
            lookbehinds.append("(?<=" + re.escape(name + separator + quote) + ")")
    return _any_of(*lookbehinds)


def _attribute_value(names: Tuple[str, ...], head: str) -> str:
    """Whole attribute value (quotes excluded) that starts with head"""
    return _any_of(
        _value_start(names, '"') + head + r'[^"]*',
        _value_start(names, "'") + head + r"[^']*",
        _value_start(names, "") + head + r"[^\s\"'>]*",
    )


def _style_attribute(body: str) -> str:
    """Whole style attribute whose value contains body"""
    return (
        r"(?<![\w-])style" + SPACE + "=" + SPACE
        + _any_of(
            r'"[^"]*?' + body + r'[^"]*"?',
            r"'[^']*?" + body + r"[^']*'?",
            r"[^\s\"'>]*?" + body + r"[^\s>]*",
        )
    )


SCHEME = _any_of(*(spaced(scheme) for scheme in DANGEROUS_SCHEMES)) + GAP + ":"
DATA_SCHEME = spaced("data") + GAP + ":"
DATA_TYPE = _any_of(*(re.escape(mime) for mime in DANGEROUS_DATA_TYPES))

SCRIPT = spaced("script")
SCRIPT_OPEN = "<" + GAP + SCRIPT + r"(?![\w-])[^>]*>"
SCRIPT_CLOSE = "<" + GAP + "/" + GAP + SCRIPT + GAP + ">"


def _comment_split_script() -> str:
    """'script' with at least one HTML comment splitting its letters"""
    filler = r"(?:[\s\u00a0]|" + COMMENT + ")*"
    alternatives = []
    for split in range(1, len("script")):
        head, tail = "script"[:split], "script"[split:]
        alternatives.append(
            filler.join(head)
            + r"(?:[\s\u00a0]*" + COMMENT + ")+" + SPACE
            + filler.join(tail)
        )
    return _any_of(*alternatives)


def _compile(source: str) -> Pattern[str]:
    return re.compile(source, FLAGS)


DANGEROUS_PATTERNS: Tuple[CatalogEntry, ...] = (
    CatalogEntry(
        "script_block", "script",
        _compile(SCRIPT_OPEN + ".*?" + SCRIPT_CLOSE),
    ),
    CatalogEntry(
        "script_tag", "script",
        _compile("<" + GAP + "/?" + GAP + SCRIPT + r"(?![\w-])[^>]*>?"),
    ),
    CatalogEntry(
        "comment_script", "comment",
        _compile(_any_of(
            r"<!--(?:(?!-->|<!--).)*?(?<![a-z])" + SPACE.join("script")
            + r"(?![a-z])(?:(?!-->|<!--).)*-->",
            r"<\s*/?\s*" + _comment_split_script() + r"(?![\w-])[^>]*>?",
        )),
    ),
    CatalogEntry(
        "data_uri_attribute", "data_uri",
        _compile(_attribute_value(DATA_ATTRIBUTES, GAP + DATA_SCHEME + SPACE + DATA_TYPE)),
    ),
    CatalogEntry(
        "uri_attribute", "protocol",
        _compile(_attribute_value(URL_ATTRIBUTES, GAP + _any_of(SCHEME, DATA_SCHEME))),
    ),
    CatalogEntry(
        "css_expression", "css_expression",
        _compile(_style_attribute(GAP + spaced("expression") + GAP + r"\(")),
    ),
    CatalogEntry(
        "style_url_script", "css_expression",
        _compile(_style_attribute(r"url" + SPACE + r"\(" + r"[^)]*?" + SCHEME)),
    ),
    CatalogEntry(
        "svg_onload", "svg",
        _compile(r"<" + SPACE + r"svg(?![\w-])[^>]*?(?<![\w-])onload" + GAP + r"=[^>]*>?"),
    ),
    CatalogEntry(
        "event_handler", "event_handler",
        _compile(
            r"(?<![\w-])on\w+(?:[\s\u00a0]|&nbsp;|" + CSS_COMMENT + "|" + COMMENT + ")*="
            + SPACE + r"(?:\"[^\"]*\"?|'[^']*'?|[^\s<>]*)"
        ),
    ),
    CatalogEntry(
        "script_protocol", "protocol",
        _compile(r"(?<![\w-])" + SCHEME),
    ),
    CatalogEntry(
        "data_uri", "protocol",
        _compile(r"(?<![\w-])" + DATA_SCHEME),
    ),
)


def extend_catalog(
    *entries: CatalogEntry, base: Tuple[CatalogEntry, ...] = DANGEROUS_PATTERNS
) -> Tuple[CatalogEntry, ...]:
    """Return a new catalog with entries appended; base is never modified"""
    names = {entry.name for entry in base}
    for entry in entries:
        if entry.name in names:
            raise ValueError(f"Duplicate catalog entry: {entry.name}")
        names.add(entry.name)
    return tuple(base) + tuple(entries)
