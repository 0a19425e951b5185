import re

import pytest

from xss_guard import CATALOG_VERSION, DANGEROUS_PATTERNS, CatalogEntry, Detector, extend_catalog
from payloads import CATALOG_SAMPLES, CLEAN_SAMPLES


def test_catalog_is_an_immutable_ordered_tuple():
    print("[test_patterns] catalog_is_an_immutable_ordered_tuple")
    assert isinstance(DANGEROUS_PATTERNS, tuple)
    names = [entry.name for entry in DANGEROUS_PATTERNS]
    assert len(names) == len(set(names))
    assert names[0] == "script_block"
    assert CATALOG_VERSION


def test_every_entry_has_a_sample():
    print("[test_patterns] every_entry_has_a_sample")
    assert {entry.name for entry in DANGEROUS_PATTERNS} == set(CATALOG_SAMPLES)


def test_required_categories_are_covered():
    print("[test_patterns] required_categories_are_covered")
    categories = {entry.category for entry in DANGEROUS_PATTERNS}
    assert {"protocol", "script", "event_handler", "css_expression", "svg", "data_uri", "comment"} <= categories


@pytest.mark.parametrize("name,payload", sorted(CATALOG_SAMPLES.items()))
def test_entry_matches_its_sample(name, payload):
    print("[test_patterns] entry_matches_its_sample")
    assert name in Detector().find(payload)


@pytest.mark.parametrize("text", CLEAN_SAMPLES)
def test_clean_text_matches_nothing(text):
    print("[test_patterns] clean_text_matches_nothing")
    assert Detector().find(text) == []


@pytest.mark.parametrize("payload", [
    "<scr ipt>alert(1)</script>",
    "<s%20cript>alert(1)</script>",
    "<SCRIPT>alert(1)</SCRIPT>",
    "<scr<!-- x -->ipt>alert(1)</script>",
])
def test_obfuscated_script_blocks(payload):
    print("[test_patterns] obfuscated_script_blocks")
    assert "script_block" in Detector().find(payload)


@pytest.mark.parametrize("payload", [
    '<a href="java script:alert(1)">x</a>',
    '<a href=" javascript:alert(1)">x</a>',
    "<a href='vbscript:msgbox(1)'>x</a>",
    '<form action="java/**/script:alert(1)">',
    "<a href=javascript:alert(1)>x</a>",
])
def test_obfuscated_uri_attributes(payload):
    print("[test_patterns] obfuscated_uri_attributes")
    assert "uri_attribute" in Detector().find(payload)


@pytest.mark.parametrize("payload", [
    '<img src="x" onerror =alert(1)>',
    "<img src=x onerror/**/=alert(1)>",
    "<img src=x onerror&nbsp;=alert(1)>",
    "<body ONLOAD = 'init()'>",
])
def test_event_handler_variants(payload):
    print("[test_patterns] event_handler_variants")
    assert "event_handler" in Detector().find(payload)


@pytest.mark.parametrize("payload", [
    '<p style="width:%20expression(alert(1))">',
    '<p style="width: expression(alert(1))">',
    "<p style='x:exp/**/ression(alert(1))'>",
])
def test_css_expression_variants(payload):
    print("[test_patterns] css_expression_variants")
    assert "css_expression" in Detector().find(payload)


def test_comment_interleaved_script_name():
    print("[test_patterns] comment_interleaved_script_name")
    assert "comment_script" in Detector().find("<scr<!-- x -->ipt>alert(1)</script>")


def test_comment_without_script_is_not_flagged():
    print("[test_patterns] comment_without_script_is_not_flagged")
    assert "comment_script" not in Detector().find("<!-- a description of the page -->")


def test_benign_data_image_is_not_a_dangerous_data_uri():
    print("[test_patterns] benign_data_image_is_not_a_dangerous_data_uri")
    assert "data_uri_attribute" not in Detector().find('<img src="data:image/png;base64,iVBORw0KGgo=">')


def test_event_handler_needs_word_boundary():
    print("[test_patterns] event_handler_needs_word_boundary")
    assert Detector().find("condition=true&section=2") == []


def test_extend_catalog_returns_new_tuple():
    print("[test_patterns] extend_catalog_returns_new_tuple")
    entry = CatalogEntry("eval_call", "script", re.compile(r"\beval\s*\(", re.IGNORECASE))
    extended = extend_catalog(entry)

    assert extended[-1] is entry
    assert len(extended) == len(DANGEROUS_PATTERNS) + 1
    assert entry not in DANGEROUS_PATTERNS
    assert Detector(extended).matches("eval(atob('x'))")
    assert not Detector().matches("eval(atob('x'))")


def test_extend_catalog_rejects_duplicate_names():
    print("[test_patterns] extend_catalog_rejects_duplicate_names")
    duplicate = CatalogEntry("script_block", "script", re.compile("x"))
    with pytest.raises(ValueError):
        extend_catalog(duplicate)


@pytest.mark.parametrize("text", ["data: x", "data:alert(1)", "see DATA :here"])
def test_data_scheme_is_flagged_anywhere(text):
    print("[test_patterns] data_scheme_is_flagged_anywhere")
    assert "data_uri" in Detector().find(text)


def test_data_scheme_needs_word_boundary():
    print("[test_patterns] data_scheme_needs_word_boundary")
    assert "data_uri" not in Detector().find("metadata: x")


@pytest.mark.parametrize("text", ["js:alert(1)", "expression:alert(1)", "JS :alert(1)"])
def test_short_and_expression_schemes(text):
    print("[test_patterns] short_and_expression_schemes")
    assert "script_protocol" in Detector().find(text)


def test_bare_handler_value_stops_at_a_bracket():
    print("[test_patterns] bare_handler_value_stops_at_a_bracket")
    assert Detector().strip("<p>Status: online=yes</p>") == "<p>Status: </p>"
