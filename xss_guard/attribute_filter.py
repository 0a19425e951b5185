"""
Attribute allow-list filtering for tags that survived the tag filter
"""
import re
from typing import Iterable, List, Tuple

from .tag_filter import TAG_REST

# Raw opening tag: name, attribute text, optional self-closing slash.
# A "/" separates attributes the way whitespace does, as in <div/id="x">
RAW_TAG = re.compile(r"<([a-zA-Z][a-zA-Z0-9:-]*)((?:[\s/]" + TAG_REST + r"?)??)(\s*/)?>")

# name=value where value is double quoted, single quoted or bare
ATTRIBUTE = re.compile(
    r"""([^\s"'<>/=]+)\s*=\s*("[^"]*"|'[^']*'|[^\s"'=<>`]+)"""
)


def parse_attributes(text: str) -> List[Tuple[str, str]]:
    """
    Parse an attribute string into (name, value) pairs

    Values keep their original quoting. Attributes without a value and stray
    tokens are not returned.
    """
    return [(match.group(1), match.group(2)) for match in ATTRIBUTE.finditer(text)]


def filter_attributes(
    text: str,
    allowed_attributes: Iterable[str],
    allowed_tags: Iterable[str] = (),
) -> str:
    """
    Rebuild every raw tag with only its allowed attributes

    Args:
        text: Output of the tag filter
        allowed_attributes: Lowercase attribute names to keep; empty keeps none
        allowed_tags: When non-empty, raw tags not in this list are left as is

    Returns:
        Text with each raw tag rewritten as <name kept="value" ...>
    """
    allowed = frozenset(allowed_attributes)
    tags = frozenset(allowed_tags)

    def rebuild(match: "re.Match[str]") -> str:
        tag_name, attributes, closing = match.groups()
        if tags and tag_name.lower() not in tags:
            return match.group(0)

        kept = "".join(
            f" {name}={value}"
            for name, value in parse_attributes(attributes)
            if name.lower() in allowed
        )
        return f"<{tag_name}{kept}{closing or ''}>"

    return RAW_TAG.sub(rebuild, text)
