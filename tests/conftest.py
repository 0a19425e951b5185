import sys
from pathlib import Path

import pytest

# Ensure the package path is available when running from repo root
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from xss_guard import XssDefender


@pytest.fixture
def defender():
    """Defender with default configuration and logging off"""
    return XssDefender({"enable_logging": False})
