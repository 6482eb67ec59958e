# -*- coding: utf-8 -*-
"""
Per-page results: the glyph shown for each compared element and the
summary table of change counts.
"""
import enum

from genshi.builder import tag

from .links import display_name
from .messages import get_string


class ResultKind(enum.Enum):
    """The outcome of comparing one position, as shown to the reader."""

    UNKNOWN = ('?', None, None)
    SAME = ('=', 'same', None)
    DIFFERENT = ('≠', 'diff', None)
    PARTIAL = ('①', 'partial', None)
    ADDED = ('+', 'add', 'missing-add')
    REMOVED = ('-', 'remove', 'missing-remove')

    def __init__(self, glyph, css_class, caption_class):
        self.glyph = glyph
        self.css_class = css_class
        self.caption_class = caption_class

    def to_content(self):
        if self.css_class is None:
            return self.glyph
        return tag.span(self.glyph, class_=self.css_class)


def result_kind(apis, api_map, equal):
    """
    Determine the ResultKind for a position.

    `apis` is the ordered list of all instances, `api_map` the values
    reported for the position (or None if it was never reported) and
    `equal` the comparison result (or None if not yet known).
    """
    if api_map is None:
        return ResultKind.UNKNOWN
    if len(api_map) == 1:
        if len(apis) == 2:
            (api,) = api_map.keys()
            if api == apis[0]:
                return ResultKind.REMOVED
            elif api == apis[1]:
                return ResultKind.ADDED
        return ResultKind.PARTIAL
    if equal is None:
        return ResultKind.PARTIAL
    return ResultKind.SAME if equal else ResultKind.DIFFERENT


class CountKind(enum.Enum):
    # Declared in summary table column order
    ELEMENT_ADDED = ('element', 'added')
    ELEMENT_CHANGED = ('element', 'changed')
    ELEMENT_REMOVED = ('element', 'removed')
    COMMENT_ADDED = ('comment', 'added')
    COMMENT_CHANGED = ('comment', 'changed')
    COMMENT_REMOVED = ('comment', 'removed')
    DESCRIPTION_ADDED = ('description', 'added')
    DESCRIPTION_CHANGED = ('description', 'changed')
    DESCRIPTION_REMOVED = ('description', 'removed')

    def __init__(self, domain, direction):
        self.domain = domain
        self.direction = direction

    @classmethod
    def of(cls, domain, direction):
        for ck in cls:
            if ck.domain == domain and ck.direction == direction:
                return ck
        raise ValueError('no count kind for %s/%s' % (domain, direction))


_DOMAIN_HEADINGS = (
    ('element', 'summary.elements'),
    ('comment', 'summary.comments'),
    ('description', 'summary.descriptions'),
)
_DIRECTION_HEADINGS = (
    ('added', 'summary.added'),
    ('changed', 'summary.changed'),
    ('removed', 'summary.removed'),
)


class ResultTable(object):
    """Counts of changes, per descendant element key, for one page."""

    def __init__(self):
        self._entries = {}

    def __len__(self):
        return len(self._entries)

    def is_empty(self):
        return not self._entries

    def inc(self, key, count_kind):
        counts = self._entries.setdefault(key, {})
        counts[count_kind] = counts.get(count_kind, 0) + 1

    def add_all(self, key, counts):
        if not counts:
            return
        entry = self._entries.setdefault(key, {})
        for ck, n in counts.items():
            entry[ck] = entry.get(ck, 0) + n

    def get(self, key):
        return dict(self._entries.get(key, {}))

    def totals(self):
        totals = {}
        for counts in self._entries.values():
            for ck, n in counts.items():
                totals[ck] = totals.get(ck, 0) + n
        return totals

    def to_content(self, links):
        totals = self.totals()

        head1 = tag.tr(tag.td(rowspan='2'))
        head2 = tag.tr()
        for domain, key in _DOMAIN_HEADINGS:
            present = [CountKind.of(domain, d) in totals for d, _ in _DIRECTION_HEADINGS]
            head1.append(_head(key, not any(present), colspan='3'))
            for (_, dkey), p in zip(_DIRECTION_HEADINGS, present):
                head2.append(_head(dkey, not p))
        head1.append(_head('summary.total', False, rowspan='2'))

        body = tag.tbody()
        for key in sorted(self._entries):
            counts = self._entries[key]
            row = tag.tr(tag.th(links.link(key, display_name(key)), scope='row'))
            for ck in CountKind:
                n = counts.get(ck)
                row.append(tag.td(str(n) if n is not None else None))
            row.append(tag.td(str(sum(counts.values()))))
            body.append(row)

        foot = tag.tr(tag.th(get_string('summary.total'), scope='row'))
        for ck in CountKind:
            n = totals.get(ck)
            foot.append(tag.td(str(n) if n is not None else None))
        foot.append(tag.td(str(sum(totals.values()))))

        return tag.table(
            tag.caption(get_string('summary.caption')),
            tag.thead(head1, head2),
            body,
            tag.tfoot(foot),
            class_='summary')


def _head(key, all_zero, **attrs):
    if all_zero:
        attrs['class_'] = 'allZero'
    return tag.th(get_string(key), **attrs)
