"""
XSS sanitization engine
Runs catalog stripping, tag filtering and attribute filtering over untrusted
strings, nested containers and URL parameter maps
"""
import threading
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel

from config import logger

from .attribute_filter import filter_attributes
from .detector import Detector, default_detector
from .logger import SanitizerLogger
from .settings import (
    DEFAULT_SANITIZATION_CONFIG,
    ConfigOverrides,
    SanitizationConfig,
    merge_config,
)
from .tag_filter import encode_brackets, filter_tags

UrlParams = Mapping[str, Union[str, Sequence[str], None]]


class UrlParamIssue(BaseModel):
    """A URL parameter value that was changed or flagged"""
    key: str
    value: str
    original_value: str


class UrlParamReport(BaseModel):
    """Result of checking a URL parameter map"""
    is_safe: bool
    issues: List[UrlParamIssue] = []


class XssDefender:
    """Sanitizes strings, containers and URL parameters against XSS"""

    MAX_PASSES = 16

    def __init__(
        self,
        initial_config: Optional[ConfigOverrides] = None,
        *,
        detector: Optional[Detector] = None,
        sanitizer_logger: Optional[SanitizerLogger] = None,
    ):
        """
        Initialize the defender

        Args:
            initial_config: Partial configuration merged over the defaults
            detector: Catalog detector, the shared default when omitted
            sanitizer_logger: Event logger, a SanitizerLogger when omitted
        """
        self._config = merge_config(DEFAULT_SANITIZATION_CONFIG, initial_config)
        self._lock = threading.Lock()
        self.detector = detector or default_detector
        self.logger = sanitizer_logger or SanitizerLogger()
        self.logger.info("XssDefender initialized.", self._config)

    def set_config(self, overrides: Optional[ConfigOverrides] = None, **kwargs: Any) -> None:
        """Merge a partial configuration into the current one"""
        if isinstance(overrides, SanitizationConfig):
            overrides = overrides.model_dump()
        changes = dict(overrides or {})
        changes.update(kwargs)
        with self._lock:
            self._config = merge_config(self._config, changes)
            current = self._config
        self.logger.info("Configuration updated.", current)

    def get_config(self) -> SanitizationConfig:
        """Current configuration snapshot (immutable)"""
        return self._config

    def derive(self, overrides: Optional[ConfigOverrides] = None) -> "XssDefender":
        """New defender sharing detector and logger, with merged configuration"""
        return XssDefender(
            merge_config(self._config, overrides),
            detector=self.detector,
            sanitizer_logger=self.logger,
        )

    def sanitize_string(self, value: Optional[Any]) -> str:
        """
        Sanitize a string, removing potential XSS threats

        Args:
            value: Untrusted value; None and "" yield ""

        Returns:
            Sanitized string
        """
        if value is None or value == "":
            return ""
        config = self._config
        original = str(value)

        limit = config.max_input_length
        if limit is not None and len(original) > limit:
            sanitized = encode_brackets(original)
            logger.debug(f"Input of {len(original)} characters exceeds limit, encoded without pattern matching")
        else:
            sanitized = self._basic_sanitization(original, config)
            # Output past the limit would take the encode branch when sanitized again
            if limit is not None and len(sanitized) > limit:
                sanitized = encode_brackets(sanitized)

        if sanitized != original:
            self._log_detection(original, sanitized, config)
        return sanitized

    def has_xss_risks(self, value: Optional[Any]) -> bool:
        """True when the raw value matches any known XSS pattern"""
        if value is None or value == "":
            return False
        return self.detector.matches(str(value))

    def sanitize_object(self, value: Any) -> Any:
        """
        Recursively sanitize every string inside a container

        Strings are sanitized, mappings are rebuilt with the same keys, lists
        and tuples keep their type, anything else is returned unchanged.

        Raises:
            ValueError: if the structure contains a reference cycle
        """
        return self._sanitize_value(value, set())

    def check_url_params(self, params: UrlParams) -> UrlParamReport:
        """
        Check URL parameters for XSS risks

        Args:
            params: Parameter name mapped to one value or a list of values

        Returns:
            UrlParamReport; each changed or flagged value becomes an issue
        """
        config = self._config
        issues = []

        for key, param_value in params.items():
            if isinstance(param_value, (list, tuple)):
                values = param_value
            elif param_value:
                values = [param_value]
            else:
                values = []

            for original in values:
                if not isinstance(original, str):
                    continue

                sanitized = self.sanitize_string(original)
                if sanitized != original:
                    message = f'Potential XSS risk in URL parameter "{key}" was sanitized.'
                elif self.has_xss_risks(original):
                    message = (
                        f'Potential XSS risk detected in URL parameter "{key}". '
                        "Input was already clean or sanitization was ineffective."
                    )
                else:
                    continue

                issues.append(UrlParamIssue(key=key, value=sanitized, original_value=original))
                self.logger.warn(
                    message,
                    {
                        "key": key,
                        "originalValue": original,
                        "sanitizedValue": sanitized,
                        "timestamp": datetime.now().isoformat(),
                    },
                    config,
                )

        return UrlParamReport(is_safe=not issues, issues=issues)

    def _basic_sanitization(self, value: str, config: SanitizationConfig) -> str:
        """
        Catalog strip, then tag filter, then attribute filter

        Removing text can join its neighbours into a new match, so the passes
        repeat until the text stops changing.
        """
        sanitized = value
        for _ in range(self.MAX_PASSES):
            previous = sanitized
            sanitized = self.detector.strip(sanitized)
            sanitized = filter_tags(sanitized, config.allowed_tags, config.strip_ignore_tag)
            sanitized = filter_attributes(sanitized, config.allowed_attributes, config.allowed_tags)
            if sanitized == previous:
                break
        return sanitized

    def _sanitize_value(self, value: Any, active: set) -> Any:
        if isinstance(value, str):
            return self.sanitize_string(value)
        if not isinstance(value, (Mapping, list, tuple)):
            return value

        marker = id(value)
        if marker in active:
            raise ValueError("Cannot sanitize a structure that contains a reference cycle")
        active.add(marker)
        try:
            if isinstance(value, Mapping):
                return {key: self._sanitize_value(item, active) for key, item in value.items()}
            items = [self._sanitize_value(item, active) for item in value]
            return tuple(items) if isinstance(value, tuple) else items
        finally:
            active.discard(marker)

    def _log_detection(self, original: str, sanitized: str, config: SanitizationConfig) -> None:
        details: Dict[str, Any] = {
            "originalValue": original,
            "sanitizedValue": sanitized,
            "configUsed": {
                "allowedTags": list(config.allowed_tags),
                "allowedAttributes": list(config.allowed_attributes),
                "stripIgnoreTag": config.strip_ignore_tag,
            },
            "timestamp": datetime.now().isoformat(),
        }
        self.logger.warn("Potential XSS detected and input sanitized.", details, config)
