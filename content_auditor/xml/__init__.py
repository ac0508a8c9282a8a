"""
XML processing modules.

Schema paths for package documents, defusedxml loading helpers, and the
HTML node tree used for item content.
"""

from __future__ import annotations

from content_auditor.xml.schema import Sch
from content_auditor.xml.utils import XmlUtils
from content_auditor.xml.html import HtmlNode, parse_html, iter_subtree, iter_following, select

__all__ = [
    "Sch",
    "XmlUtils",
    "HtmlNode",
    "parse_html",
    "iter_subtree",
    "iter_following",
    "select",
]
