import pytest
from markupsafe import Markup
from pydantic import ValidationError

from xss_guard import FilterLevel, FilterOptions, PolicySanitizer


def test_strict_removes_scripts_and_handlers():
    print("[test_policy] strict_removes_scripts_and_handlers")
    sanitizer = PolicySanitizer()
    result = sanitizer.sanitize('<p onclick="alert(1)">Hi</p><script>alert(1)</script>')
    assert "onclick" not in result
    assert "<script" not in result
    assert "Hi" in result


def test_javascript_scheme_is_neutralized():
    print("[test_policy] javascript_scheme_is_neutralized")
    result = PolicySanitizer().sanitize('<a href="javascript:alert(1)">x</a>')
    assert result == '<a href="invalid:alert(1)">x</a>'


def test_unsafe_url_attribute_is_replaced():
    print("[test_policy] unsafe_url_attribute_is_replaced")
    result = PolicySanitizer().sanitize('<a href="vbscript:msgbox(1)">x</a>')
    assert result == '<a href="invalid:">x</a>'


def test_base64_data_uri_is_neutralized():
    print("[test_policy] base64_data_uri_is_neutralized")
    result = PolicySanitizer().sanitize('<img src="data:text/html;base64,PHNjcmlwdD4=">')
    assert "base64" not in result
    assert "invalid:" in result


def test_strict_drops_all_styling():
    print("[test_policy] strict_drops_all_styling")
    result = PolicySanitizer().sanitize('<p style="color:red">x</p><style>p { color: red }</style>')
    assert result == "<p>x</p>"


def test_basic_only_rewrites_dangerous_styles():
    print("[test_policy] basic_only_rewrites_dangerous_styles")
    sanitizer = PolicySanitizer(FilterOptions(level=FilterLevel.BASIC))
    assert sanitizer.sanitize('<p style="color:red">x</p>') == '<p style="color:red">x</p>'

    result = sanitizer.sanitize('<p style="width: expression(alert(1))">x</p>')
    assert "expression" not in result
    assert "removed" in result


def test_disallowed_tags_are_removed():
    print("[test_policy] disallowed_tags_are_removed")
    result = PolicySanitizer().sanitize('<iframe src="x"></iframe><p>ok</p><embed src="y">')
    assert result == "<p>ok</p>"


def test_disabled_passes_are_skipped():
    print("[test_policy] disabled_passes_are_skipped")
    sanitizer = PolicySanitizer()
    sanitizer.configure(enable_script_filtering=False)
    assert sanitizer.sanitize("<p>javascript:alert(1)</p>") == "<p>javascript:alert(1)</p>"
    # script is still a disallowed tag
    assert sanitizer.sanitize("<script>x</script>ok") == "ok"


def test_custom_level_delegates():
    print("[test_policy] custom_level_delegates")
    sanitizer = PolicySanitizer(FilterOptions(level="custom", custom_sanitizer=str.upper))
    assert sanitizer.sanitize("<b>x</b>") == "<B>X</B>"


def test_custom_level_without_callable_uses_passes():
    print("[test_policy] custom_level_without_callable_uses_passes")
    sanitizer = PolicySanitizer(FilterOptions(level="custom"))
    assert sanitizer.sanitize("<script>x</script>ok") == "ok"


def test_empty_input():
    print("[test_policy] empty_input")
    sanitizer = PolicySanitizer()
    assert sanitizer.sanitize(None) == ""
    assert sanitizer.sanitize("") == ""
    assert sanitizer.detect_threat(None) is False


def test_detect_threat():
    print("[test_policy] detect_threat")
    sanitizer = PolicySanitizer()
    assert sanitizer.detect_threat("eval(payload)") is True
    assert sanitizer.detect_threat("<img src=x onerror=alert(1)>") is True
    assert sanitizer.detect_threat("javascript:void(0)") is True
    assert sanitizer.detect_threat("An evaluation of the results") is False


def test_configure_and_reset():
    print("[test_policy] configure_and_reset")
    sanitizer = PolicySanitizer()
    sanitizer.configure(level="basic", disallowed_tags=["marquee"])
    options = sanitizer.get_options()
    assert options.level == FilterLevel.BASIC
    assert options.disallowed_tags == ["marquee"]

    # configure starts over from the defaults each time
    sanitizer.configure(enable_url_filtering=False)
    assert sanitizer.get_options().level == FilterLevel.STRICT

    sanitizer.reset_to_defaults()
    assert sanitizer.get_options() == FilterOptions()


def test_get_options_returns_a_copy():
    print("[test_policy] get_options_returns_a_copy")
    sanitizer = PolicySanitizer()
    sanitizer.get_options().disallowed_tags.append("p")
    assert "p" not in sanitizer.get_options().disallowed_tags


def test_unknown_option_is_rejected():
    print("[test_policy] unknown_option_is_rejected")
    with pytest.raises(ValidationError):
        PolicySanitizer().configure(level="paranoid")
    with pytest.raises(ValidationError):
        PolicySanitizer().configure(allow_everything=True)


def test_markup_and_describe():
    print("[test_policy] markup_and_describe")
    sanitizer = PolicySanitizer()
    markup = sanitizer.sanitize_to_markup("<p>ok</p><script>x</script>")
    assert isinstance(markup, Markup)
    assert str(markup) == "<p>ok</p>"

    summary = sanitizer.describe()
    assert summary["level"] == "strict"
    assert summary["has_custom_sanitizer"] is False
    assert "custom_sanitizer" not in summary
