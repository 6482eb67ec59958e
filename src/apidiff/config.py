# -*- coding: utf-8 -*-
"""
Configuration and constants for apidiff.
"""
import re

# Regular expressions (exported for use in other modules)
_line_split_re = re.compile(r'\r\n|[\n\x0b\x0c\r\x85\u2028\u2029]')
_leading_space_re = re.compile(r'^(\s+)', re.U)
_token_split_re = re.compile(r'(\s+|[^\w\s]+)', re.U)
_line_token_re = re.compile(r'[^\W\d_]\w*|\d+|\s+|.', re.U)
_entity_re = re.compile(
    r'&(?:(?P<name>[a-z][a-z0-9]*)|#(?P<dec>[0-9]+)|#x(?P<hex>[0-9a-f]+))(?P<semi>;)?',
    re.I)
_tooltip_tag_re = re.compile(r'<(/?)([a-z][a-z0-9]*)([^>]*)>', re.I)

# Classes used by the markup differ for classified text runs
DIFF_ADDED = 'diff-html-added'
DIFF_REMOVED = 'diff-html-removed'
DIFF_CHANGED = 'diff-html-changed'
DIFF_SPAN_CLASSES = frozenset([DIFF_ADDED, DIFF_REMOVED, DIFF_CHANGED])

# Element wrapped around each parsed fragment; dropped when the diff tree is rebuilt
DIFF_WRAPPER = 'diff'

# Names accepted without a warning when a diff tree is rebuilt
KNOWN_TAGS = frozenset([
    'a', 'abbr', 'b', 'big', 'blockquote', 'br', 'caption', 'cite', 'code',
    'dd', 'del', 'dfn', 'div', 'dl', 'dt', 'em', 'figcaption', 'figure',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'hr', 'i', 'img', 'ins', 'kbd', 'li',
    'main', 'mark', 'nav', 'ol', 'p', 'pre', 'q', 's', 'samp', 'section',
    'small', 'span', 'strike', 'strong', 'sub', 'sup', 'table', 'tbody', 'td',
    'tfoot', 'th', 'thead', 'tr', 'tt', 'u', 'ul', 'var', 'wbr',
])
KNOWN_ATTRS = frozenset([
    'alt', 'border', 'cellpadding', 'cellspacing', 'class', 'colspan', 'dir',
    'height', 'href', 'id', 'lang', 'name', 'rel', 'role', 'rowspan', 'scope',
    'src', 'start', 'style', 'summary', 'target', 'title', 'type', 'width',
])

# Characters that must stay encoded until the markup parser has run
MARKUP_SIGNIFICANT_CHARS = frozenset('<>&"\'')


class ReportConfig(object):
    """
    Runtime configuration for report generation.

    Every option is a class-level default; override per instance as needed.
    """

    # Report content
    title = None
    compare_doc_comments = True
    compare_api_descriptions = True
    # Compare API descriptions as plain text rather than as markup trees
    compare_api_descriptions_as_text = False

    # Text diffs
    context_size = 5
    show_line_numbers = True

    # Markup diffs
    # Matches with no more tokens than this are ignored, preventing
    # "shredded" diffs on unrelated texts.
    markup_match_threshold = 2
    preserve_whitespace_in_diff = False

    # Inline alternatives for changed signature fragments
    missing_text = '(missing)'
    alternative_separator = ' → '

    # Output
    stylesheet = None
    default_stylesheet = 'apidiff.css'
    # Drop pages from the registry once they have been written
    release_completed_pages = True

    def __init__(self, **options):
        for name, value in options.items():
            if not hasattr(type(self), name):
                raise TypeError('unknown option: %s' % name)
            setattr(self, name, value)
