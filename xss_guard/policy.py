"""
Policy-level HTML sanitization
Level based filtering (basic / strict / custom) with script, style, URL and
disallowed-tag passes
"""
import re
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from markupsafe import Markup
from pydantic import BaseModel, ConfigDict

from config import logger


class FilterLevel(str, Enum):
    BASIC = "basic"
    STRICT = "strict"
    CUSTOM = "custom"


class FilterOptions(BaseModel):
    """Options for PolicySanitizer"""

    model_config = ConfigDict(extra="forbid")

    level: FilterLevel = FilterLevel.STRICT
    enable_script_filtering: bool = True
    enable_style_filtering: bool = True
    enable_url_filtering: bool = True
    disallowed_tags: List[str] = ["script", "iframe", "object", "embed", "form"]
    custom_sanitizer: Optional[Callable[[str], str]] = None


class PolicySanitizer:
    """Sanitizes HTML according to a filter level and option set"""

    SCRIPT_BLOCK = re.compile(r'<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>', re.IGNORECASE)
    EVENT_HANDLER = re.compile(r'\s+on\w+\s*=\s*["\']?[^"\'>\s]+', re.IGNORECASE)
    JAVASCRIPT_URI = re.compile(r'javascript:', re.IGNORECASE)
    EVAL_CALL = re.compile(r'\beval\s*\(', re.IGNORECASE)
    BASE64_DATA_URI = re.compile(r'data:[^;]*;base64,[a-z0-9+/=]', re.IGNORECASE)

    STYLE_BLOCK = re.compile(r'<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>', re.IGNORECASE)
    STYLE_ATTRIBUTE = re.compile(r'\s+style\s*=\s*["\'][^"\']*["\']', re.IGNORECASE)
    DANGEROUS_STYLE = re.compile(
        r'style\s*=\s*["\'](.*?)(expression|javascript|url\s*\(|position\s*:\s*fixed)(.*?)["\']',
        re.IGNORECASE
    )

    URL_ATTRIBUTES = ['src', 'href', 'action', 'formaction', 'background']
    UNSAFE_URL = re.compile(r'^(javascript|data|vbscript):', re.IGNORECASE)

    def __init__(self, options: Optional[FilterOptions] = None):
        """Initialize with the default options unless options are given"""
        self.default_options = FilterOptions()
        self.options = options if options is not None else self.default_options.model_copy(deep=True)

    def configure(self, **options: Any) -> None:
        """Reset to the defaults, then apply the given options"""
        data = self.default_options.model_dump()
        data.update(options)
        self.options = FilterOptions.model_validate(data)

    def get_options(self) -> FilterOptions:
        """Copy of the active options"""
        return self.options.model_copy(deep=True)

    def reset_to_defaults(self) -> None:
        self.options = self.default_options.model_copy(deep=True)

    def sanitize(self, value: Optional[str]) -> str:
        """
        Sanitize an HTML string according to the active options

        Args:
            value: HTML to sanitize

        Returns:
            Sanitized string
        """
        if not value:
            return ''

        if self.options.level == FilterLevel.CUSTOM and self.options.custom_sanitizer:
            return self.options.custom_sanitizer(value)

        sanitized = value
        if self.options.enable_script_filtering:
            sanitized = self._filter_scripts(sanitized)
        if self.options.enable_style_filtering:
            sanitized = self._filter_styles(sanitized)
        if self.options.enable_url_filtering:
            sanitized = self._filter_urls(sanitized)
        sanitized = self._filter_disallowed_tags(sanitized)

        if sanitized != value:
            logger.debug(f"Policy sanitizer ({self.options.level.value}) modified input")
        return sanitized

    def sanitize_to_markup(self, value: Optional[str]) -> Markup:
        """Sanitize and mark the result as safe for template rendering"""
        return Markup(self.sanitize(value))

    def detect_threat(self, value: Optional[str]) -> bool:
        """True when value contains a script, handler, eval, data or javascript URI"""
        if not value:
            return False
        checks = [
            self.SCRIPT_BLOCK,
            self.EVENT_HANDLER,
            self.EVAL_CALL,
            self.BASE64_DATA_URI,
            self.JAVASCRIPT_URI,
        ]
        return any(pattern.search(value) for pattern in checks)

    def _filter_scripts(self, value: str) -> str:
        filtered = self.SCRIPT_BLOCK.sub('', value)
        filtered = self.EVENT_HANDLER.sub('', filtered)
        return self.JAVASCRIPT_URI.sub('invalid:', filtered)

    def _filter_styles(self, value: str) -> str:
        # Strict mode drops styling altogether
        if self.options.level == FilterLevel.STRICT:
            filtered = self.STYLE_BLOCK.sub('', value)
            return self.STYLE_ATTRIBUTE.sub('', filtered)

        return self.DANGEROUS_STYLE.sub(r'style="\1removed\3"', value)

    def _filter_urls(self, value: str) -> str:
        filtered = self.BASE64_DATA_URI.sub('invalid:', value)

        for attr in self.URL_ATTRIBUTES:
            pattern = re.compile(rf'{attr}\s*=\s*["\'](.*?)["\']', re.IGNORECASE)

            def replace(match: "re.Match[str]", attr: str = attr) -> str:
                if self.UNSAFE_URL.match(match.group(1)):
                    return f'{attr}="invalid:"'
                return match.group(0)

            filtered = pattern.sub(replace, filtered)

        return filtered

    def _filter_disallowed_tags(self, value: str) -> str:
        filtered = value
        for tag in self.options.disallowed_tags:
            name = re.escape(tag)
            paired = re.compile(rf'<{name}\b[^<]*(?:(?!</{name}>)<[^<]*)*</{name}>', re.IGNORECASE)
            filtered = paired.sub('', filtered)

            single = re.compile(rf'<{name}\b[^>]*/?>', re.IGNORECASE)
            filtered = single.sub('', filtered)

        return filtered

    def describe(self) -> Dict[str, Any]:
        """Serializable summary of the active options"""
        summary = self.options.model_dump(exclude={'custom_sanitizer'}, mode='json')
        summary['has_custom_sanitizer'] = self.options.custom_sanitizer is not None
        return summary
