"""
Jinja2 bindings
Template filters that sanitize values and hand them to the renderer as trusted markup
"""
from typing import Any, Optional

from jinja2 import Environment
from markupsafe import Markup

from .defender import XssDefender
from .settings import ConfigOverrides


def sanitize_markup(
    defender: XssDefender, value: Any, overrides: Optional[ConfigOverrides] = None
) -> Markup:
    """
    Sanitize value and mark it safe for rendering

    Args:
        defender: Engine doing the sanitization
        value: Untrusted value
        overrides: Per-call configuration; the shared defender is not modified

    Returns:
        Markup wrapping the sanitized string
    """
    if value is None or value == "":
        return Markup("")
    engine = defender.derive(overrides) if overrides else defender
    return Markup(engine.sanitize_string(value))


def register_filters(env: Environment, defender: XssDefender) -> Environment:
    """Install the xss_sanitize and xss_risky filters on env"""

    def xss_sanitize(value: Any, **overrides: Any) -> Markup:
        return sanitize_markup(defender, value, overrides or None)

    def xss_risky(value: Any) -> bool:
        return defender.has_xss_risks(value)

    env.filters["xss_sanitize"] = xss_sanitize
    env.filters["xss_risky"] = xss_risky
    return env
