"""
XSS sanitization exports
Pattern catalog, detector, tag/attribute filters, engine and policy sanitizer
"""
from .patterns import CATALOG_VERSION, DANGEROUS_PATTERNS, CatalogEntry, extend_catalog
from .detector import Detector, default_detector
from .tag_filter import filter_tags, encode_brackets
from .attribute_filter import filter_attributes, parse_attributes
from .settings import DEFAULT_SANITIZATION_CONFIG, SanitizationConfig, merge_config
from .logger import SanitizerLogger
from .defender import UrlParamIssue, UrlParamReport, XssDefender
from .policy import FilterLevel, FilterOptions, PolicySanitizer
from .templating import register_filters, sanitize_markup

__all__ = [
    'CATALOG_VERSION',
    'DANGEROUS_PATTERNS',
    'CatalogEntry',
    'extend_catalog',
    'Detector',
    'default_detector',
    'filter_tags',
    'encode_brackets',
    'filter_attributes',
    'parse_attributes',
    'DEFAULT_SANITIZATION_CONFIG',
    'SanitizationConfig',
    'merge_config',
    'SanitizerLogger',
    'UrlParamIssue',
    'UrlParamReport',
    'XssDefender',
    'FilterLevel',
    'FilterOptions',
    'PolicySanitizer',
    'register_filters',
    'sanitize_markup',
]
