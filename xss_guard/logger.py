"""
Logging collaborator for sanitization events
"""
import json
import logging
from typing import Any, Dict, Optional

from config import logger

from .settings import SanitizationConfig


class SanitizerLogger:
    """Writes sanitizer events, honouring enable_logging and log_format"""

    PREFIX = "XssDefender"

    def __init__(self, target: Optional[logging.Logger] = None):
        self.target = target or logger

    def info(self, message: str, config: SanitizationConfig) -> None:
        """Log an informational message"""
        if not config.enable_logging:
            return
        self._emit(logging.INFO, message, None, config)

    def warn(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        config: Optional[SanitizationConfig] = None,
    ) -> None:
        """Log a warning; details are only written in the detailed format"""
        if config is None or not config.enable_logging:
            return
        self._emit(logging.WARNING, message, details, config)

    def _emit(
        self,
        level: int,
        message: str,
        details: Optional[Dict[str, Any]],
        config: SanitizationConfig,
    ) -> None:
        try:
            if config.log_format == "detailed" and details:
                self.target.log(
                    level,
                    f"{self.PREFIX}: {message} {json.dumps(details, default=str, ensure_ascii=False)}",
                )
            else:
                self.target.log(level, f"{self.PREFIX}: {message}")
        except Exception:
            # Logging is fire-and-forget; a broken sink never reaches the caller
            return
