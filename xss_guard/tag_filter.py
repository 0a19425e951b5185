"""
Tag allow-list filtering
Disallowed tags are either removed or rendered inert by escaping their brackets
"""
import re
from functools import lru_cache
from typing import Iterable, Pattern, Tuple

# A tag opens with "<" or "</" and a letter, "!" or "?"; the name runs up to
# whitespace, "/" or ">"
TAG_NAME = r"[a-zA-Z!?][^\s/<>]*"

# Text after the tag name; quoted values may contain "<" and ">", bare text may not
TAG_REST = r"""(?:[^<>"']|"[^"]*"|'[^']*')*"""

# The opening bracket of a tag that never closes cleanly, e.g. "<iframe src=x <b>>"
BROKEN_TAG = r"</?(?=[a-zA-Z!?])(?!" + TAG_NAME + TAG_REST + r">)"


def encode_brackets(text: str) -> str:
    """Entity-encode angle brackets only"""
    return text.replace("<", "&lt;").replace(">", "&gt;")


@lru_cache(maxsize=64)
def disallowed_tag_pattern(allowed_tags: Tuple[str, ...]) -> Pattern[str]:
    """Single matcher for every tag whose name is not in allowed_tags"""
    allowed = ""
    if allowed_tags:
        names = "|".join(re.escape(tag) for tag in allowed_tags)
        allowed = r"(?!(?:" + names + r")(?=[\s/>]))"
    return re.compile(
        r"</?" + allowed + TAG_NAME + TAG_REST + r">|" + BROKEN_TAG,
        re.IGNORECASE,
    )


def filter_tags(text: str, allowed_tags: Iterable[str], strip_ignore_tag: bool) -> str:
    """
    Apply the tag allow-list to text

    Broken tags are treated as disallowed whatever their name, so no raw "<"
    that opens a tag survives unless it opens a complete allowed tag.

    Args:
        text: Text already stripped of catalog matches
        allowed_tags: Lowercase tag names that survive untouched
        strip_ignore_tag: Remove disallowed tags when True, encode them otherwise

    Returns:
        Text with every disallowed tag removed or encoded
    """
    pattern = disallowed_tag_pattern(tuple(allowed_tags))

    if not strip_ignore_tag:
        return pattern.sub(lambda match: encode_brackets(match.group(0)), text)

    # Removing a tag can join the text around it into a new one
    stripped = pattern.sub("", text)
    while stripped != text:
        text, stripped = stripped, pattern.sub("", stripped)
    return stripped
