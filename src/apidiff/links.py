# -*- coding: utf-8 -*-
"""
Addressing of report pages: where each element is written, and the
in-page anchors and relative links between pages.
"""
import logging
import posixpath

from genshi.builder import tag

from .errors import Abort
from .model import ElementKind, TypeKind

logger = logging.getLogger(__name__)

MODULE_SUMMARY = 'module-summary.html'
PACKAGE_SUMMARY = 'package-summary.html'
INDEX_PAGE = 'index.html'


def _package_dir(pkey):
    parts = []
    if pkey.enclosing is not None:
        parts.append(pkey.enclosing.name)
    if pkey.name:
        parts.extend(pkey.name.split('.'))
    return '/'.join(parts)


def _type_names(tkey):
    """Return (package key, [outer, ..., simple name]) for a type key."""
    names = []
    k = tkey
    while k is not None and k.kind is ElementKind.TYPE:
        names.append(k.name)
        k = k.enclosing
    if k is None or k.kind is not ElementKind.PACKAGE:
        raise ValueError('type not enclosed by a package: %r' % (tkey,))
    names.reverse()
    return k, names


def path_for(key):
    """
    Return the output path of the page on which `key` is documented,
    relative to the report directory, or `None` for elements that are
    only rendered inline.
    """
    kind = key.kind
    if kind is ElementKind.MODULE:
        return '%s/%s' % (key.name, MODULE_SUMMARY)
    elif kind is ElementKind.PACKAGE:
        d = _package_dir(key)
        return '%s/%s' % (d, PACKAGE_SUMMARY) if d else PACKAGE_SUMMARY
    elif kind is ElementKind.TYPE:
        pkey, names = _type_names(key)
        d = _package_dir(pkey)
        filename = '.'.join(names) + '.html'
        return '%s/%s' % (d, filename) if d else filename
    elif kind is ElementKind.EXECUTABLE or kind is ElementKind.VARIABLE:
        if key.enclosing is None:
            raise ValueError('member without enclosing type: %r' % (key,))
        return path_for(key.enclosing)
    elif kind is ElementKind.TYPE_PARAMETER:
        return None
    raise ValueError('unknown kind: %r' % (kind,))


def _type_anchor(tkey):
    kind = tkey.kind
    if kind is TypeKind.PRIMITIVE or kind is TypeKind.TYPE_VARIABLE:
        return tkey.name
    elif kind is TypeKind.DECLARED:
        return tkey.element.name
    elif kind is TypeKind.ARRAY:
        return _type_anchor(tkey.component) + '[]'
    elif kind is TypeKind.WILDCARD:
        raise ValueError('wildcard not allowed in a parameter list: %r' % (tkey,))
    raise ValueError('unknown type kind: %r' % (kind,))


def anchor_for(key):
    """Return the fragment id for `key` on its page, or `None` for page roots."""
    kind = key.kind
    if kind in (ElementKind.MODULE, ElementKind.PACKAGE, ElementKind.TYPE):
        return None
    elif kind is ElementKind.EXECUTABLE:
        return '%s(%s)' % (key.name, ','.join(_type_anchor(p) for p in key.params))
    elif kind is ElementKind.VARIABLE:
        return key.name
    elif kind is ElementKind.TYPE_PARAMETER:
        raise ValueError('type parameters have no anchor: %r' % (key,))
    raise ValueError('unknown kind: %r' % (kind,))


def page_key_for(key):
    """
    Return the key of the page that owns `key`.

    Modules, packages and types own their pages; members and type
    parameters belong to the page of the nearest enclosing type.
    """
    seen = set()
    k = key
    while True:
        if k is None:
            logger.error('no page for %r: enclosing chain is broken', key)
            raise Abort('no page for %r' % (key,))
        if k in seen:
            logger.error('no page for %r: enclosing chain has a cycle', key)
            raise Abort('no page for %r' % (key,))
        seen.add(k)
        kind = k.kind
        if kind in (ElementKind.MODULE, ElementKind.PACKAGE, ElementKind.TYPE):
            return k
        elif kind in (ElementKind.EXECUTABLE, ElementKind.VARIABLE,
                      ElementKind.TYPE_PARAMETER):
            k = k.enclosing
        else:
            logger.error('no page for %r: unknown kind %r', key, kind)
            raise Abort('no page for %r' % (key,))


def _type_display(tkey):
    kind = tkey.kind
    if kind is TypeKind.PRIMITIVE or kind is TypeKind.TYPE_VARIABLE:
        return tkey.name
    elif kind is TypeKind.DECLARED:
        return display_name(tkey.element)
    elif kind is TypeKind.ARRAY:
        return _type_display(tkey.component) + '[]'
    elif kind is TypeKind.WILDCARD:
        s = '?'
        if tkey.extends_bound is not None:
            s += ' extends ' + _type_display(tkey.extends_bound)
        if tkey.super_bound is not None:
            s += ' super ' + _type_display(tkey.super_bound)
        return s
    raise ValueError('unknown type kind: %r' % (kind,))


def display_name(key):
    """Return the name used for `key` in summary tables and headings."""
    kind = key.kind
    if kind is ElementKind.MODULE or kind is ElementKind.PACKAGE:
        return key.name
    elif kind is ElementKind.TYPE:
        if key.enclosing is not None and key.enclosing.kind is ElementKind.TYPE:
            return display_name(key.enclosing) + '.' + key.name
        return key.name
    elif kind is ElementKind.EXECUTABLE:
        return '%s(%s)' % (key.name, ','.join(_type_display(p) for p in key.params))
    elif kind is ElementKind.VARIABLE or kind is ElementKind.TYPE_PARAMETER:
        return key.name
    raise ValueError('unknown kind: %r' % (kind,))


def note_name(key):
    """
    Return the signature used to refer to `key` in a notes file, such as
    ``mod/pkg.Outer.Inner#method(int,String[])``.
    """
    kind = key.kind
    if kind is ElementKind.MODULE:
        return key.name
    elif kind is ElementKind.PACKAGE:
        if key.enclosing is not None:
            return '%s/%s' % (note_name(key.enclosing), key.name)
        return key.name
    elif kind is ElementKind.TYPE:
        if key.enclosing is not None:
            return '%s.%s' % (note_name(key.enclosing), key.name)
        return key.name
    elif kind is ElementKind.EXECUTABLE:
        return '%s#%s(%s)' % (note_name(key.enclosing), key.name,
                              ','.join(_type_anchor(p) for p in key.params))
    elif kind is ElementKind.VARIABLE:
        return '%s#%s' % (note_name(key.enclosing), key.name)
    elif kind is ElementKind.TYPE_PARAMETER:
        raise ValueError('type parameters have no note name: %r' % (key,))
    raise ValueError('unknown kind: %r' % (kind,))


class Links(object):
    """Creates links relative to the page written at `file`."""

    def __init__(self, file):
        self.file = file
        self.dir = posixpath.dirname(file) or '.'

    def path(self, rel):
        """Return the path to `rel` (relative to the report root) from this page."""
        return posixpath.relpath(rel, self.dir)

    def href(self, key):
        page = path_for(key)
        if page is None:
            page = path_for(page_key_for(key))
        href = self.path(page)
        anchor = anchor_for(key) if key.kind is not ElementKind.TYPE_PARAMETER else None
        if anchor:
            href += '#' + anchor
        return href

    def link(self, key, text=None):
        if text is None:
            text = display_name(key)
        return tag.a(text, href=self.href(key))
