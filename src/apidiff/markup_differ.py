# -*- coding: utf-8 -*-
"""
Main classes for diffing streams of Genshi events.
"""
from contextlib import contextmanager
from difflib import SequenceMatcher
from itertools import zip_longest

from genshi.core import Attrs, QName, START, END, TEXT, escape

from .config import (ReportConfig, DIFF_ADDED, DIFF_REMOVED, DIFF_CHANGED,
                     _leading_space_re, _token_split_re)
from .messages import get_string


class InsensitiveSequenceMatcher(SequenceMatcher):
    """
    SequenceMatcher that ignores very small matching blocks.

    This prevents "shredded" diffs where unrelated texts get word-by-word
    interleaving due to incidental small matches.
    """

    def __init__(self, isjunk=None, a='', b='', threshold=2):
        super().__init__(isjunk, a, b, autojunk=False)
        self.threshold = threshold

    def get_matching_blocks(self):
        # Scale the threshold down for very short sequences
        size = min(len(self.a), len(self.b))
        effective_threshold = min(self.threshold, size // 4)

        blocks = super().get_matching_blocks()
        # Keep blocks larger than threshold, or the sentinel (size=0) at the end.
        return [block for block in blocks
                if block[2] > effective_threshold or block[2] == 0]


def event_key(event):
    kind, data, _pos = event
    return kind, data


def cut_leading_space(s):
    """Cut leading whitespace from a string, returning (whitespace, rest)."""
    match = _leading_space_re.match(s)
    if match is None:
        return '', s
    return match.group(), s[match.end():]


def describe_change(old_tag, old_attrs, new_tag, new_attrs):
    """Return an HTML fragment listing how an element start tag changed."""
    items = []
    if old_tag != new_tag:
        items.append(get_string('htmldiffs.change.tag',
                                escape(old_tag.localname), escape(new_tag.localname)))
    old = dict((k.localname, v) for k, v in old_attrs)
    new = dict((k.localname, v) for k, v in new_attrs)
    for name in sorted(set(old) | set(new)):
        before, after = old.get(name), new.get(name)
        if before == after:
            continue
        if before is None:
            items.append(get_string('htmldiffs.change.attr-added',
                                    escape(name), escape(after)))
        elif after is None:
            items.append(get_string('htmldiffs.change.attr-removed',
                                    escape(name), escape(before)))
        else:
            items.append(get_string('htmldiffs.change.attr-changed',
                                    escape(name), escape(before), escape(after)))
    return '<ul>%s</ul>' % ''.join('<li>%s</li>' % i for i in items)


class MarkupDiffer(object):
    """
    Diffs two streams of Genshi events.

    The result is a single stream in which text only in the old stream is
    wrapped in ``<span class="diff-html-removed">``, text only in the new
    stream in ``<span class="diff-html-added">``, and text inside elements
    whose start tag changed in ``<span class="diff-html-changed">`` carrying
    a ``changes`` attribute that describes the change.
    """

    def __init__(self, old_stream, new_stream, config=None):
        self.config = config or ReportConfig()
        self._old_events = list(old_stream)
        self._new_events = list(new_stream)
        self._result = None
        self._stack = []
        self._context = None
        # (stack depth, description) for elements whose start tag changed
        self._changes = []

    @contextmanager
    def context(self, kind):
        old_context = self._context
        self._context = kind
        try:
            yield
        finally:
            self._context = old_context

    def append(self, type, data, pos):
        self._result.append((type, data, pos))

    def text_split(self, text):
        return [p for p in _token_split_re.split(text) if p]

    def _span(self, pos, classname, text, extra=()):
        span = QName('span')
        self.append(START, (span, Attrs([(QName('class'), classname)] + list(extra))), pos)
        self.append(TEXT, text, pos)
        self.append(END, span, pos)

    def mark_text(self, pos, text, kind):
        classname = DIFF_ADDED if kind == 'ins' else DIFF_REMOVED
        if getattr(self.config, 'preserve_whitespace_in_diff', False):
            self._span(pos, classname, text)
            return
        ws, text = cut_leading_space(text)
        if ws:
            self.text(pos, ws)
        self._span(pos, classname, text)

    def text(self, pos, text):
        """Append unchanged text, marking it if an enclosing element changed."""
        if self._changes and text.strip():
            changes = self._changes[-1][1]
            self._span(pos, DIFF_CHANGED, text, [(QName('changes'), changes)])
        else:
            self.append(TEXT, text, pos)

    def diff_text(self, pos, old_text, new_text):
        old = self.text_split(old_text)
        new = self.text_split(new_text)
        threshold = getattr(self.config, 'markup_match_threshold', 2)
        matcher = InsensitiveSequenceMatcher(None, old, new, threshold=threshold)

        # Deletions are emitted before insertions within each changed region
        pending_del = []
        pending_ins = []

        def flush_pending():
            if pending_del:
                self.mark_text(pos, ''.join(pending_del), 'del')
                del pending_del[:]
            if pending_ins:
                self.mark_text(pos, ''.join(pending_ins), 'ins')
                del pending_ins[:]

        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == 'equal':
                flush_pending()
                self.text(pos, ''.join(old[i1:i2]))
            elif tag == 'replace':
                pending_del.extend(old[i1:i2])
                pending_ins.extend(new[j1:j2])
            elif tag == 'delete':
                pending_del.extend(old[i1:i2])
            elif tag == 'insert':
                pending_ins.extend(new[j1:j2])
        flush_pending()

    def enter(self, pos, tag, attrs):
        self._stack.append(tag)
        self.append(START, (tag, attrs), pos)

    def enter_mark_changed(self, pos, tag, attrs, old_tag, old_attrs):
        self.enter(pos, tag, attrs)
        self._changes.append((len(self._stack),
                              describe_change(old_tag, old_attrs, tag, attrs)))

    def leave(self, pos, tag):
        if not self._stack:
            return False
        if tag == self._stack[-1]:
            if self._changes and self._changes[-1][0] == len(self._stack):
                self._changes.pop()
            self.append(END, tag, pos)
            self._stack.pop()
            return True
        return False

    def leave_all(self):
        if self._stack:
            last_pos = (self._new_events or self._old_events)[-1][2]
            for tag in reversed(list(self._stack)):
                self.leave(last_pos, tag)
        del self._stack[:]
        del self._changes[:]

    def block_process(self, events):
        for event_type, data, pos in events:
            if event_type == START:
                self.enter(pos, *data)
            elif event_type == END:
                self.leave(pos, data)
            elif event_type == TEXT:
                if self._context is not None and (
                        data.strip() or ('\n' not in data and '\r' not in data)):
                    self.mark_text(pos, data, self._context)
                else:
                    self.text(pos, data)

    def delete(self, start, end):
        with self.context('del'):
            self.block_process(self._old_events[start:end])

    def insert(self, start, end):
        with self.context('ins'):
            self.block_process(self._new_events[start:end])

    def unchanged(self, start, end):
        with self.context(None):
            self.block_process(self._old_events[start:end])

    def replace(self, old_start, old_end, new_start, new_end):
        old = self._old_events[old_start:old_end]
        new = self._new_events[new_start:new_end]
        for idx, (old_event, new_event) in enumerate(zip_longest(old, new)):
            if old_event is None:
                self.insert(new_start + idx, new_end)
                break
            elif new_event is None:
                self.delete(old_start + idx, old_end)
                break

            old_type, old_data, _ = old_event
            new_type, new_data, pos = new_event
            if old_type == new_type:
                if new_type == START:
                    old_tag, old_attrs = old_data
                    tag, attrs = new_data
                    if old_tag == tag and old_attrs == attrs:
                        self.enter(pos, tag, attrs)
                    else:
                        self.enter_mark_changed(pos, tag, attrs, old_tag, old_attrs)
                elif new_type == END:
                    if not self.leave(pos, new_data):
                        self.leave(pos, old_data)
                elif new_type == TEXT:
                    self.diff_text(pos, old_data, new_data)
                else:
                    self.append(*new_event)
            elif old_type == TEXT and new_type in (START, END):
                # Old text went away where the new stream opens or closes a tag
                self.mark_text(old_event[2], old_data, 'del')
                if new_type == START:
                    self.enter(pos, *new_data)
                else:
                    self.leave(pos, new_data)
            elif old_type in (START, END) and new_type == TEXT:
                self.delete(old_start + idx, old_end)
                self.insert(new_start + idx, new_end)
                break
            else:
                # START against END: keep both sides in full
                self.delete(old_start + idx, old_end)
                self.insert(new_start + idx, new_end)
                break

    def process(self):
        self._result = []
        matcher = SequenceMatcher(None,
                                  [event_key(e) for e in self._old_events],
                                  [event_key(e) for e in self._new_events],
                                  autojunk=False)
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == 'replace':
                self.replace(i1, i2, j1, j2)
            elif tag == 'delete':
                self.delete(i1, i2)
            elif tag == 'insert':
                self.insert(j1, j2)
            else:
                self.unchanged(i1, i2)
        self.leave_all()

    def get_diff_events(self):
        if self._result is None:
            self.process()
        return self._result


def diff_events(old_stream, new_stream, config=None):
    """Return the annotated event list for two Genshi streams."""
    return MarkupDiffer(old_stream, new_stream, config).get_diff_events()
