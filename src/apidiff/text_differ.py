# -*- coding: utf-8 -*-
"""
Line and token level text diffs, rendered side by side.

The line diff yields deltas over whole lines.  Within each delta the two
chunks are tokenized and diffed again so that changed words can be
highlighted inside changed lines.
"""
import enum
import logging
from collections import namedtuple
from difflib import SequenceMatcher

from genshi.builder import tag

from .config import ReportConfig, _line_split_re, _line_token_re
from .pairwise import PairwiseDiffBuilder
from .results import CountKind

logger = logging.getLogger(__name__)


class DeltaType(enum.Enum):
    EQUAL = 'equal'
    INSERT = 'insert'
    DELETE = 'delete'
    CHANGE = 'replace'


class Chunk(namedtuple('Chunk', 'position lines')):
    """A run of lines (or tokens) starting at `position` in its sequence."""

    __slots__ = ()

    def size(self):
        return len(self.lines)

    def last(self):
        return self.position + len(self.lines) - 1


Delta = namedtuple('Delta', 'type source target')


def split_lines(text):
    """
    Split `text` at any line terminator.  Trailing empty lines are dropped,
    but an empty text is a single empty line.
    """
    lines = _line_split_re.split(text)
    while len(lines) > 1 and lines[-1] == '':
        lines.pop()
    return lines


def diff_sequences(a, b, include_equal=False):
    """Return the deltas that transform sequence `a` into sequence `b`."""
    a = list(a)
    b = list(b)
    matcher = SequenceMatcher(None, a, b, autojunk=False)
    deltas = []
    for op, i1, i2, j1, j2 in matcher.get_opcodes():
        dtype = DeltaType(op)
        if dtype is DeltaType.EQUAL and not include_equal:
            continue
        deltas.append(Delta(dtype, Chunk(i1, a[i1:i2]), Chunk(j1, b[j1:j2])))
    return deltas


def apply_deltas(lines, deltas):
    """Apply `deltas` to `lines`, returning the target sequence."""
    result = list(lines)
    for delta in sorted(deltas, key=lambda d: d.source.position, reverse=True):
        if delta.type is DeltaType.EQUAL:
            continue
        src = delta.source
        if result[src.position:src.position + src.size()] != list(src.lines):
            raise ValueError('delta does not apply at line %d' % (src.position + 1))
        result[src.position:src.position + src.size()] = delta.target.lines
    return result


def is_insert(left, right):
    """
    Return True if chunk `right` reads as `left` with text inserted into it:
    `left` is empty, or its single line is split between a prefix of the
    first line of `right` and a suffix of its last line.
    """
    if left.size() == 0:
        return True
    if left.size() == 1 and right.size() > 0:
        line = left.lines[0]
        first = right.lines[0]
        last = right.lines[-1]
        n = min(len(line), len(first))
        i = 0
        while i < n and line[i] == first[i]:
            if last.endswith(line[i:]):
                return True
            i += 1
    return False


def classify_delta(delta):
    if is_insert(delta.source, delta.target):
        return 'added'
    if is_insert(delta.target, delta.source):
        return 'removed'
    return 'changed'


def count_deltas(deltas, counter, domain='comment'):
    for delta in deltas:
        if delta.type is DeltaType.EQUAL:
            continue
        counter(CountKind.of(domain, classify_delta(delta)))


def tokenize(lines):
    """Split lines into identifier, digit, whitespace and single-character
    tokens, with a "\\n" token after each line."""
    tokens = []
    for line in lines:
        tokens.extend(_line_token_re.findall(line))
        tokens.append('\n')
    return tokens


Segment = namedtuple('Segment', 'text css_class')

# Marks elided context in a column
SEPARATOR = Segment(None, 'hr')

_REF_LINE_CLASSES = {
    DeltaType.CHANGE: 'sdiffs-lines-changed',
    DeltaType.DELETE: 'sdiffs-lines-deleted',
}
_MOD_LINE_CLASSES = {
    DeltaType.CHANGE: 'sdiffs-lines-changed',
    DeltaType.INSERT: 'sdiffs-lines-inserted',
}
_TOKEN_CLASSES = {
    DeltaType.EQUAL: None,
    DeltaType.DELETE: 'sdiffs-chars-deleted',
    DeltaType.CHANGE: 'sdiffs-chars-changed',
    DeltaType.INSERT: 'sdiffs-chars-inserted',
}


def format_line_number(n):
    return '%4d ' % n


class _TokenWriter(object):
    """Writes the tokens of one chunk to a column, coalescing runs of
    tokens that share a class."""

    def __init__(self, column, chunk, default_class, show_line_numbers):
        self.column = column
        self.default_class = default_class
        self.show_line_numbers = show_line_numbers
        self.pending = []
        self.pending_class = None
        self.line_number = chunk.position + 1
        self.displayed_line_number = -1

    def add(self, token, css_class):
        if token == '\n':
            self.flush()
            self.column.append(Segment('\n', None))
            self.line_number += 1
            return
        if css_class != self.pending_class:
            self.flush()
            self.pending_class = css_class
        self.pending.append(token)

    def flush(self):
        if self.show_line_numbers and self.line_number > self.displayed_line_number:
            self.column.append(Segment(format_line_number(self.line_number), None))
            self.displayed_line_number = self.line_number
        if self.pending:
            self.column.append(Segment(''.join(self.pending),
                                       self.pending_class or self.default_class))
        self.pending = []

    def pad(self, n):
        if n > 0:
            self.column.append(Segment('\n' * n, None))


class SideBySideDiff(object):
    """
    Builds a two-column view of the differences between a reference and
    a modified list of lines.
    """

    def __init__(self, context_size=5, show_line_numbers=True):
        self.context_size = context_size
        self.show_line_numbers = show_line_numbers
        self.ref_title = self.mod_title = ''
        self.ref_lines = self.mod_lines = ()

    def set_reference(self, title, lines):
        self.ref_title = title
        self.ref_lines = list(lines)
        return self

    def set_modified(self, title, lines):
        self.mod_title = title
        self.mod_lines = list(lines)
        return self

    def columns(self, deltas=None):
        """Return the (reference, modified) lists of segments."""
        if deltas is None:
            deltas = diff_sequences(self.ref_lines, self.mod_lines)
        ref_col = []
        mod_col = []
        ref_index = mod_index = 0
        for delta in deltas:
            if delta.type is DeltaType.EQUAL:
                continue
            self._add_context(ref_col, self.ref_lines, ref_index, delta.source.position)
            self._add_context(mod_col, self.mod_lines, mod_index, delta.target.position)
            self._add_delta(ref_col, mod_col, delta)
            ref_index = delta.source.last() + 1
            mod_index = delta.target.last() + 1
        c = self.context_size
        self._add_context(ref_col, self.ref_lines, ref_index,
                          min(ref_index + c, len(self.ref_lines)))
        self._add_context(mod_col, self.mod_lines, mod_index,
                          min(mod_index + c, len(self.mod_lines)))
        return ref_col, mod_col

    def build(self, deltas=None):
        if deltas is None:
            deltas = diff_sequences(self.ref_lines, self.mod_lines)
        if not any(d.type is not DeltaType.EQUAL for d in deltas):
            return tag()
        ref_col, mod_col = self.columns(deltas)
        return tag.div(
            tag.div(tag.div(self.ref_title, class_='sdiffs-title'),
                    _render_column(ref_col), class_='sdiffs-ref'),
            tag.div(tag.div(self.mod_title, class_='sdiffs-title'),
                    _render_column(mod_col), class_='sdiffs-mod'),
            class_='sdiffs')

    def _add_context(self, column, lines, start, end):
        c = self.context_size
        if end > start + 2 * c:
            self._add_lines(column, lines, start, start + c)
            column.append(SEPARATOR)
            self._add_lines(column, lines, end - c, end)
        else:
            self._add_lines(column, lines, start, end)

    def _add_lines(self, column, lines, start, end):
        if end <= start:
            return
        parts = []
        for i in range(start, end):
            if self.show_line_numbers:
                parts.append(format_line_number(i + 1))
            parts.append(lines[i])
            parts.append('\n')
        column.append(Segment(''.join(parts), None))

    def _add_delta(self, ref_col, mod_col, delta):
        ref_chunk, mod_chunk = delta.source, delta.target
        ref_writer = _TokenWriter(ref_col, ref_chunk, _REF_LINE_CLASSES.get(delta.type),
                                  self.show_line_numbers)
        mod_writer = _TokenWriter(mod_col, mod_chunk, _MOD_LINE_CLASSES.get(delta.type),
                                  self.show_line_numbers)
        token_deltas = diff_sequences(tokenize(ref_chunk.lines),
                                      tokenize(mod_chunk.lines), include_equal=True)
        for td in token_deltas:
            css_class = _TOKEN_CLASSES[td.type]
            for t in td.source.lines:
                ref_writer.add(t, css_class)
            for t in td.target.lines:
                mod_writer.add(t, css_class)
        size = max(ref_chunk.size(), mod_chunk.size())
        ref_writer.pad(size - ref_chunk.size())
        mod_writer.pad(size - mod_chunk.size())


def _render_column(column):
    """Group segments into <pre> blocks, split at elision separators."""
    blocks = []
    pre = None
    for seg in column:
        if seg is SEPARATOR:
            blocks.append(tag.hr())
            pre = None
            continue
        if pre is None:
            pre = tag.pre()
            blocks.append(pre)
        if seg.css_class is None:
            pre.append(seg.text)
        else:
            pre.append(tag.span(seg.text, class_=seg.css_class))
    return blocks


class TextDiffBuilder(PairwiseDiffBuilder):
    """Pairwise comparison of plain text, such as raw doc comments."""

    def __init__(self, apis, domain='comment', config=None):
        PairwiseDiffBuilder.__init__(self, apis, config)
        self.domain = domain

    def build_pair(self, ref_apis, ref_item, focus_apis, focus_item, counter):
        _, not_in_title, only_in_title = self.titles('textdiffs', ref_apis, focus_apis)
        if ref_item is not None and focus_item is not None:
            ref_lines = split_lines(ref_item)
            mod_lines = split_lines(focus_item)
            deltas = diff_sequences(ref_lines, mod_lines)
            count_deltas(deltas, counter, self.domain)
            return SideBySideDiff(self.config.context_size, self.config.show_line_numbers) \
                .set_reference(', '.join(a.name for a in ref_apis), ref_lines) \
                .set_modified(', '.join(a.name for a in focus_apis), mod_lines) \
                .build(deltas)
        elif ref_item is None:
            counter(CountKind.of(self.domain, 'added'))
            return self.build_solo(not_in_title, focus_item)
        else:
            counter(CountKind.of(self.domain, 'removed'))
            return self.build_solo(only_in_title, ref_item)

    def build_solo(self, title, item):
        return tag.div(tag.div(title, class_='xdiffs-title'), tag.pre(item),
                       class_='xdiffs')
