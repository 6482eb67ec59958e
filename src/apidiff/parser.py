# -*- coding: utf-8 -*-
"""
HTML parsing functions for apidiff.
"""
import logging

import html5lib
from html5lib.constants import entities
from genshi.input import ET

from .config import DIFF_WRAPPER, MARKUP_SIGNIFICANT_CHARS, _entity_re

logger = logging.getLogger(__name__)


def _decode_entity(match):
    name = match.group('name')
    if name is not None:
        key = name + ';' if match.group('semi') else name
        ch = entities.get(key)
        if ch is None:
            return match.group(0)
    else:
        dec = match.group('dec')
        try:
            code = int(dec) if dec is not None else int(match.group('hex'), 16)
            ch = chr(code)
        except (ValueError, OverflowError):
            return match.group(0)
        if code == 0 or 0xd800 <= code <= 0xdfff:
            return match.group(0)
    if any(c in MARKUP_SIGNIFICANT_CHARS for c in ch):
        return match.group(0)
    return ch


def decode_entities(text):
    """
    Replace named, decimal and hexadecimal character references in `text`.

    Unknown names are left as they are.  References to characters with a
    meaning in markup (such as ``&lt;``), to NUL and to surrogates are
    also left for the parser, which replaces the last two with U+FFFD.
    """
    if '&' not in text:
        return text
    return _entity_re.sub(_decode_entity, text)


def _drop_comments(element):
    prev = None
    for child in list(element):
        if not isinstance(child.tag, str):
            tail = child.tail or ''
            if tail:
                if prev is not None:
                    prev.tail = (prev.tail or '') + tail
                else:
                    element.text = (element.text or '') + tail
            element.remove(child)
            continue
        _drop_comments(child)
        prev = child


def parse_tree(html, wrapper_element=DIFF_WRAPPER):
    """Parse an HTML fragment into an element tree rooted at `wrapper_element`."""
    builder = html5lib.getTreeBuilder('etree')
    parser = html5lib.HTMLParser(tree=builder, namespaceHTMLElements=False)
    tree = parser.parseFragment(decode_entities(html))
    tree.tag = wrapper_element
    _drop_comments(tree)
    return tree


def parse_html(html, wrapper_element=DIFF_WRAPPER):
    """Parse an HTML fragment into a Genshi stream."""
    return ET(parse_tree(html, wrapper_element))

