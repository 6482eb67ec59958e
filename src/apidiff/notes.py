# -*- coding: utf-8 -*-
"""
Notes: links to external documents, associated with API elements.

A notes file contains groups of lines.  Each group starts with a line
giving a URI and a description, followed by lines giving the signatures
of the elements to which the note applies::

    # comment
    https://bugs.example.org/1234  Rework of the collections API
    java.base/java.util.List
    java.base/java.util.Map#get(Object)
    java.base/java.util.concurrent.*

A signature ending in ``.*`` or ``/*`` applies to the element and to all
the elements it encloses.
"""
import logging
import re
from collections import OrderedDict, namedtuple
from urllib.parse import urlsplit

from genshi.builder import tag

from .links import note_name
from .model import ElementKind

logger = logging.getLogger(__name__)

_line_re = re.compile(r'\s*(\S+)\s*(.*?)\s*$')

Entry = namedtuple('Entry', 'name uri description recursive')


def _is_identifier(name):
    return name.isidentifier()


def _is_qualified_identifier(name):
    return all(_is_identifier(part) for part in name.split('.'))


def is_valid_signature(sig):
    slash = sig.find('/')
    if slash != -1:
        if not _is_qualified_identifier(sig[:slash]):
            return False
        sig = sig[slash + 1:]
        if not sig:
            return True
    hash_ = sig.find('#')
    if hash_ == -1:
        return _is_qualified_identifier(sig)
    type_name, member = sig[:hash_], sig[hash_ + 1:]
    if not _is_qualified_identifier(type_name):
        return False
    lparen = member.find('(')
    if lparen == -1:
        return _is_identifier(member)
    if not member.endswith(')'):
        return False
    method, params = member[:lparen], member[lparen + 1:-1]
    return ((_is_identifier(method) or method == '<init>')
            and (not params or all(_is_identifier(p) for p in params.split(','))))


def _is_valid_uri(text):
    if any(c.isspace() for c in text):
        return False
    try:
        parts = urlsplit(text)
    except ValueError:
        return False
    return bool(parts.scheme)


class Notes(object):
    """The entries read from a notes file, indexed by signature."""

    def __init__(self):
        self._entries = {}

    @classmethod
    def read(cls, path):
        with open(path, encoding='utf-8') as f:
            return cls.parse(f, str(path))

    @classmethod
    def parse(cls, lines, source='<notes>'):
        notes = cls()
        uri = description = None
        skip = False
        for lineno, line in enumerate(lines, 1):
            line = line.rstrip('\r\n')
            if line.startswith('#') or not line.strip():
                continue
            m = _line_re.match(line)
            first, rest = m.group(1), m.group(2)
            if ':' in first:
                if _is_valid_uri(first):
                    uri, description = first, rest
                    skip = False
                else:
                    logger.error('%s:%d: bad URI: %s', source, lineno, first)
                    skip = True
                continue
            if rest:
                logger.error('%s:%d: bad line: %s', source, lineno, line)
                continue
            recursive = first.endswith('/*') or first.endswith('.*')
            if recursive:
                first = first[:-2]
            if not is_valid_signature(first):
                logger.error('%s:%d: bad signature: %s', source, lineno, first)
                continue
            if skip:
                continue
            if uri is None:
                logger.error('%s:%d: no current URI', source, lineno)
                skip = True
                continue
            notes._entries.setdefault(first, []).append(
                Entry(first, uri, description, recursive))
        return notes

    def __len__(self):
        return sum(len(v) for v in self._entries.values())

    def get_entries(self, key):
        """
        Return an ordered mapping from the entries that apply to `key` to a
        flag that is True when the entry was inherited from an enclosing
        element.
        """
        result = OrderedDict()
        self._collect(key, False, result)
        return result

    def _collect(self, key, is_parent, result):
        kind = key.kind
        if kind is ElementKind.TYPE_PARAMETER:
            raise ValueError('type parameters have no notes: %r' % (key,))
        if kind in (ElementKind.PACKAGE, ElementKind.TYPE) and key.enclosing is not None:
            self._collect(key.enclosing, True, result)
        for e in self._entries.get(note_name(key), ()):
            if is_parent:
                if e.recursive:
                    result[e] = True
            else:
                result[e] = False


def _sort_key(entry):
    return entry.description or '', entry.uri


class NotesTable(object):
    """The index of notes, with the elements that refer to each one."""

    def __init__(self, links):
        self.links = links
        self._table = {}

    def is_empty(self):
        return not self._table

    def add(self, entry, key):
        self._table.setdefault(entry, []).append(key)

    def to_content(self):
        if not self._table:
            return tag()
        dl = tag.dl()
        for entry in sorted(self._table, key=_sort_key):
            dl.append(tag.dt(tag.a(entry.description, href=entry.uri)))
            dd = tag.dd()
            for i, key in enumerate(sorted(self._table[entry])):
                if i:
                    dd.append(', ')
                dd.append(self.links.link(key, note_name(key).replace('#', '.')))
            dl.append(dd)
        return dl
