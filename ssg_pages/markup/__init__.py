"""Offset-based HTML splicing, template-block extraction, and page formatting."""

from .assets import AssetRecord, find_asset_ref, stringify_other_attributes
from .critical import CriticalCssOptions, CriticalCssProcessor, get_critical_processor
from .formatting import format_html, serialize_document
from .injector import inject
from .tagtree import TagNode, parse_tags, walk
from .template_block import ExtractionMode, TemplateBlock, compose, copy_to_theme

__all__ = [
    "AssetRecord",
    "CriticalCssOptions",
    "CriticalCssProcessor",
    "ExtractionMode",
    "TagNode",
    "TemplateBlock",
    "compose",
    "copy_to_theme",
    "find_asset_ref",
    "format_html",
    "get_critical_processor",
    "inject",
    "parse_tags",
    "serialize_document",
    "stringify_other_attributes",
    "walk",
]
