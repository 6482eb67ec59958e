# -*- coding: utf-8 -*-
"""
Rendering of markup differences.

The annotated event stream produced by `MarkupDiffer` is rebuilt into a
Genshi element tree, normalizing the classified spans on the way, and the
spans are then counted for the page summary.
"""
import logging

from genshi.builder import Element, tag
from genshi.core import Markup, QName, START, END, TEXT

from .config import (DIFF_ADDED, DIFF_REMOVED, DIFF_SPAN_CLASSES, DIFF_CHANGED,
                     DIFF_WRAPPER, KNOWN_ATTRS, KNOWN_TAGS, _tooltip_tag_re)
from .markup_differ import MarkupDiffer
from .pairwise import PairwiseDiffBuilder
from .parser import parse_html
from .results import CountKind

logger = logging.getLogger(__name__)


def _classname(node):
    if isinstance(node, Element) and node.tag.localname == 'span':
        return node.attrib.get('class')
    return None


def is_diff_span(node):
    return _classname(node) in DIFF_SPAN_CLASSES


def is_added_removed(node):
    return _classname(node) in (DIFF_ADDED, DIFF_REMOVED)


def _is_empty(node):
    return all(isinstance(c, str) and not c for c in node.children)


def get_change_tooltip(html):
    """
    Convert a change description to phrasing content for a tooltip.

    List containers and items become spans with a distinguishing class and
    line breaks are dropped; other tags are kept as they are.
    """
    contents = []
    start = 0
    for m in _tooltip_tag_re.finditer(html):
        if m.start() > start:
            contents.append(Markup(html[start:m.start()]))
        name = m.group(2).lower()
        if not m.group(1):
            if name in ('ul', 'li'):
                contents.append(Markup('<span class="hdiffs-tip-%s">' % name))
            elif name != 'br':
                contents.append(Markup(m.group()))
        else:
            if name in ('ul', 'li'):
                contents.append(Markup('</span>'))
            elif name != 'br':
                contents.append(Markup(m.group()))
        start = m.end()
    if start < len(html):
        contents.append(Markup(html[start:]))
    return tag.span(*contents, class_='hdiffs-tooltip')


class DiffTreeBuilder(object):
    """
    Builds an element tree from an annotated diff stream.

    Empty added/removed spans are dropped, and an added/removed span that
    immediately follows a sibling span of the same class is merged into it.
    """

    def __init__(self):
        self._stack = [tag.div()]

    @property
    def root(self):
        return self._stack[0]

    def feed(self, events):
        for kind, data, _pos in events:
            if kind == START:
                self.start(*data)
            elif kind == END:
                self.end(data)
            elif kind == TEXT:
                self._stack[-1].children.append(data)
        return self

    def start(self, qname, attrs):
        name = QName(qname).localname
        if name == DIFF_WRAPPER:
            return
        if name not in KNOWN_TAGS:
            logger.warning('unknown tag name in markup diff: %s', name)
        elem = Element(name)
        for attr, value in attrs:
            aname = attr.localname
            if name == 'span' and aname == 'changes':
                elem.children.append(get_change_tooltip(value))
                continue
            if aname not in KNOWN_ATTRS:
                logger.warning('unknown attribute name in markup diff: %s %s', name, aname)
            elem.attrib |= [(QName(aname), value)]
        self._stack.append(elem)

    def end(self, qname):
        name = QName(qname).localname
        if name == DIFF_WRAPPER:
            return
        elem = self._stack.pop()
        if elem.tag.localname != name:
            logger.warning('unbalanced markup diff: expected %s, found %s',
                           name, elem.tag.localname)
        _add_child(self._stack[-1], elem)


def _add_child(parent, elem):
    if is_added_removed(elem):
        if _is_empty(elem):
            return
        if parent.children:
            prev = parent.children[-1]
            if is_added_removed(prev) and _classname(prev) == _classname(elem):
                prev.children.extend(elem.children)
                return
    parent.children.append(elem)


def merge_adjacent_spans(tree):
    """
    Drop empty added/removed spans and merge adjacent ones of the same
    class, throughout `tree`.  Returns `tree`, which is modified in place.
    """
    children = tree.children
    tree.children = []
    for child in children:
        if isinstance(child, Element):
            merge_adjacent_spans(child)
            _add_child(tree, child)
        else:
            tree.children.append(child)
    return tree


def count_spans(tree, counter, domain='description'):
    """
    Count the runs of adjacent classified spans in `tree`: a run with a
    changed span, or with both added and removed spans, is a change; a
    run with only added spans is an addition; otherwise a removal.
    """
    children = tree.children
    i = 0
    while i < len(children):
        child = children[i]
        if not isinstance(child, Element):
            i += 1
            continue
        if is_diff_span(child):
            classes = set()
            while i < len(children) and is_diff_span(children[i]):
                classes.add(_classname(children[i]))
                i += 1
            if DIFF_CHANGED in classes or (DIFF_ADDED in classes and DIFF_REMOVED in classes):
                counter(CountKind.of(domain, 'changed'))
            elif DIFF_ADDED in classes:
                counter(CountKind.of(domain, 'added'))
            else:
                counter(CountKind.of(domain, 'removed'))
        else:
            count_spans(child, counter, domain)
            i += 1


def diff_html(old, new, config=None):
    """Return the element tree showing the differences between two HTML fragments."""
    events = MarkupDiffer(parse_html(old), parse_html(new), config).get_diff_events()
    return DiffTreeBuilder().feed(events).root


class HtmlDiffBuilder(PairwiseDiffBuilder):
    """Pairwise comparison of HTML fragments, such as API descriptions."""

    def __init__(self, apis, domain='description', config=None):
        PairwiseDiffBuilder.__init__(self, apis, config)
        self.domain = domain

    def build_pair(self, ref_apis, ref_item, focus_apis, focus_item, counter):
        comparing, not_in_title, only_in_title = self.titles('htmldiffs', ref_apis, focus_apis)
        if ref_item is not None and focus_item is not None:
            return self.build_diff(comparing, ref_item, focus_item, counter)
        elif ref_item is None:
            counter(CountKind.of(self.domain, 'added'))
            return self.build_solo(not_in_title, focus_item)
        else:
            counter(CountKind.of(self.domain, 'removed'))
            return self.build_solo(only_in_title, ref_item)

    def build_diff(self, title, ref_item, focus_item, counter):
        try:
            doc = diff_html(ref_item, focus_item, self.config)
        except Exception:
            logger.error('error while comparing markup: %s', title, exc_info=True)
            return tag()
        count_spans(doc, counter, self.domain)
        return tag.div(tag.div(title, class_='hdiffs-title'), doc, class_='hdiffs')

    def build_solo(self, title, item):
        return tag.div(tag.div(title, class_='hdiffs-title'), Markup(item),
                       class_='hdiffs')
