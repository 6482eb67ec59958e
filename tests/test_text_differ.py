import xml.etree.ElementTree as ET

import html5lib
import pytest

from apidiff.config import ReportConfig
from apidiff.model import API, APIMap
from apidiff.results import CountKind
from apidiff.text_differ import (SEPARATOR, Chunk, DeltaType, SideBySideDiff,
                                 TextDiffBuilder, apply_deltas, classify_delta,
                                 diff_sequences, is_insert, split_lines,
                                 tokenize)

A1, A2 = API('v1'), API('v2')


def _parse(html):
    root = ET.Element('root')
    for child in html5lib.parseFragment(html, treebuilder='etree',
                                        namespaceHTMLElements=False):
        root.append(child)
    return root


def _text(el):
    return ''.join(el.itertext())


def test_split_lines():
    assert split_lines('a\r\nb\rc\nd') == ['a', 'b', 'c', 'd']
    assert split_lines('a\n\n\n') == ['a']
    assert split_lines('') == ['']
    assert split_lines('a\n\nb') == ['a', '', 'b']


def test_single_changed_line():
    ref = split_lines('A\nB\nC')
    mod = split_lines('A\nX\nC')
    deltas = diff_sequences(ref, mod)
    assert len(deltas) == 1
    (delta,) = deltas
    assert delta.type is DeltaType.CHANGE
    assert delta.source == Chunk(1, ['B'])
    assert delta.target == Chunk(1, ['X'])

    ref_col, mod_col = SideBySideDiff(context_size=5).set_reference('v1', ref) \
        .set_modified('v2', mod).columns(deltas)
    # one line of context each side of the change
    assert ref_col[0].text == '   1 A\n'
    assert ref_col[-1].text == '   3 C\n'
    assert mod_col[0].text == '   1 A\n'
    assert mod_col[-1].text == '   3 C\n'
    assert SEPARATOR not in ref_col


def test_doc_comment_change_is_counted():
    api_map = APIMap.of([A1, A2], {A1: 'A\nB\nC', A2: 'A\nX\nC'})
    counts = []
    contents = TextDiffBuilder([A1, A2]).build(api_map, counts.append)
    assert counts == [CountKind.COMMENT_CHANGED]
    assert len(contents) == 1
    root = _parse(str(contents[0]))
    assert root.find(".//div[@class='sdiffs-ref']") is not None
    changed = root.findall(".//span[@class='sdiffs-chars-changed']")
    assert [_text(s) for s in changed] == ['B', 'X']


@pytest.mark.parametrize('between,separators', [(3, 0), (10, 0), (11, 1), (30, 1)])
def test_context_elision(between, separators):
    c = 5
    ref = ['first'] + ['same %d' % i for i in range(between)] + ['last']
    mod = ['FIRST'] + ['same %d' % i for i in range(between)] + ['LAST']
    diff = SideBySideDiff(context_size=c, show_line_numbers=False)
    ref_col, _ = diff.set_reference('v1', ref).set_modified('v2', mod).columns()
    assert ref_col.count(SEPARATOR) == separators
    context = ''.join(seg.text for seg in ref_col
                      if seg is not SEPARATOR and seg.css_class is None)
    assert context.count('same') == min(between, 2 * c)


def test_trailing_context():
    ref = ['x'] + ['tail %d' % i for i in range(20)]
    mod = ['y'] + ['tail %d' % i for i in range(20)]
    diff = SideBySideDiff(context_size=2, show_line_numbers=False)
    ref_col, mod_col = diff.set_reference('v1', ref).set_modified('v2', mod).columns()
    assert ref_col[-1].text == 'tail 0\ntail 1\n'
    assert SEPARATOR not in ref_col


def test_shorter_side_is_padded():
    diff = SideBySideDiff(show_line_numbers=False)
    ref_col, mod_col = diff.set_reference('v1', ['a', 'b', 'c']) \
        .set_modified('v2', ['a', 'c']).columns()
    assert ''.join(s.text for s in ref_col).count('\n') == \
        ''.join(s.text for s in mod_col).count('\n')


def test_no_line_numbers():
    diff = SideBySideDiff(show_line_numbers=False)
    ref_col, _ = diff.set_reference('v1', ['a', 'b']).set_modified('v2', ['a', 'c']).columns()
    assert ref_col[0].text == 'a\n'


def test_build_without_changes_is_empty():
    diff = SideBySideDiff().set_reference('v1', ['a']).set_modified('v2', ['a'])
    assert str(diff.build()) == ''


@pytest.mark.parametrize('ref,mod', [
    ([], []),
    ([], ['a']),
    (['a'], []),
    (['a'], ['b']),
    (['a', 'b', 'c'], ['x', 'y']),
    (['a', 'b', 'c', 'd'], ['b', 'x', 'd', 'e', 'a']),
    (['same'] * 4, ['same'] * 2 + ['other'] + ['same'] * 3),
])
def test_deltas_round_trip(ref, mod):
    assert apply_deltas(ref, diff_sequences(ref, mod)) == mod
    assert apply_deltas(ref, diff_sequences(ref, mod, include_equal=True)) == mod


def test_apply_deltas_checks_source():
    deltas = diff_sequences(['a', 'b'], ['a', 'c'])
    with pytest.raises(ValueError):
        apply_deltas(['a', 'z'], deltas)


def test_is_insert():
    assert is_insert(Chunk(0, []), Chunk(0, ['new']))
    assert is_insert(Chunk(0, ['Hello world']), Chunk(0, ['Hello there world']))
    assert is_insert(Chunk(0, ['abc']), Chunk(0, ['abX', 'Ybc']))
    assert not is_insert(Chunk(0, ['abc']), Chunk(0, ['xyz']))
    assert not is_insert(Chunk(0, ['a', 'b']), Chunk(0, ['a', 'x', 'b']))


def test_classify_delta():
    add, = diff_sequences(['Hello world'], ['Hello there world'])
    assert classify_delta(add) == 'added'
    rem, = diff_sequences(['Hello there world'], ['Hello world'])
    assert classify_delta(rem) == 'removed'
    chg, = diff_sequences(['abc'], ['xyz'])
    assert classify_delta(chg) == 'changed'


def test_tokenize():
    assert tokenize(['int x1 = 42;']) == ['int', ' ', 'x1', ' ', '=', ' ', '42', ';', '\n']
    assert tokenize(['', 'a']) == ['\n', 'a', '\n']


def test_solo_views():
    counts = []
    api_map = APIMap.of([A1, A2], {A2: 'only here'})
    (content,) = TextDiffBuilder([A1, A2], 'description').build(api_map, counts.append)
    assert counts == [CountKind.DESCRIPTION_ADDED]
    root = _parse(str(content))
    assert _text(root.find(".//div[@class='xdiffs-title']")) == 'Not in v1; only in v2'
    assert _text(root.find('.//pre')) == 'only here'


def test_config_controls_line_numbers():
    api_map = APIMap.of([A1, A2], {A1: 'a\nb', A2: 'a\nc'})
    config = ReportConfig(show_line_numbers=False)
    (content,) = TextDiffBuilder([A1, A2], config=config).build(api_map)
    assert '   1 ' not in str(content)
