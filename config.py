import os
import logging
from dotenv import load_dotenv
from typing import Any, Dict, List, Optional

# load environment variables
load_dotenv()


def _env_list(name: str) -> Optional[List[str]]:
    """Comma separated environment list, None when the variable is unset"""
    raw = os.getenv(name)
    if raw is None:
        return None
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_bool(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip().lower() == "true"


class Config:
    """Application configuration class"""

    def __init__(self):
        # Server settings
        self.HOST = os.getenv("HOST", "localhost")
        self.PORT = int(os.getenv("PORT", "8000"))
        self.DEBUG = os.getenv("DEBUG", "False").lower() == "true"

        # Logging settings
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_FILE = os.getenv("LOG_FILE", "")

        # Sanitizer bootstrap settings (unset means "use the engine default")
        self.XSS_ALLOWED_TAGS = _env_list("XSS_ALLOWED_TAGS")
        self.XSS_ALLOWED_ATTRIBUTES = _env_list("XSS_ALLOWED_ATTRIBUTES")
        self.XSS_STRIP_IGNORE_TAG = _env_bool("XSS_STRIP_IGNORE_TAG")
        self.XSS_ENABLE_LOGGING = _env_bool("XSS_ENABLE_LOGGING")
        self.XSS_LOG_FORMAT = os.getenv("XSS_LOG_FORMAT")
        max_length = os.getenv("XSS_MAX_INPUT_LENGTH")
        self.XSS_MAX_INPUT_LENGTH = int(max_length) if max_length else None

        # Setup logging
        self._setup_logging()

    def _setup_logging(self):
        """Setup logging configuration"""
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers = [console_handler]

        if self.LOG_FILE:
            log_dir = os.path.dirname(self.LOG_FILE)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            # Create handlers with UTF-8 encoding
            file_handler = logging.FileHandler(self.LOG_FILE, encoding='utf-8')
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)

        # Configure root logger
        logging.basicConfig(
            level=getattr(logging, self.LOG_LEVEL.upper()),
            handlers=handlers
        )

    def sanitization_overrides(self) -> Dict[str, Any]:
        """Partial sanitizer configuration built from the environment"""
        candidates = {
            "allowed_tags": self.XSS_ALLOWED_TAGS,
            "allowed_attributes": self.XSS_ALLOWED_ATTRIBUTES,
            "strip_ignore_tag": self.XSS_STRIP_IGNORE_TAG,
            "enable_logging": self.XSS_ENABLE_LOGGING,
            "log_format": self.XSS_LOG_FORMAT,
            "max_input_length": self.XSS_MAX_INPUT_LENGTH,
        }
        return {key: value for key, value in candidates.items() if value is not None}

    def __repr__(self):
        return f"Config(HOST={self.HOST}, PORT={self.PORT}, DEBUG={self.DEBUG}, LOG_LEVEL={self.LOG_LEVEL}, LOG_FILE={self.LOG_FILE}, XSS={self.sanitization_overrides()})"

# Global config instance
config = Config()

# Logger instance
logger = logging.getLogger("xss_guard")
