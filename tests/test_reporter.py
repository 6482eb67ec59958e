import logging

import html5lib
import pytest

from apidiff.config import ReportConfig
from apidiff.errors import Abort, ReportError
from apidiff.model import (API, APIMap, Annotation, DocFile, Element,
                           ElementKey, ElementKind, Position, RelativeKind,
                           executable_key, module_key, package_key,
                           primitive_type, type_key, variable_key)
from apidiff.notes import Notes
from apidiff.reporter import (HtmlReporter, LogReporter, MultiplexReporter,
                              Reporter)

A1, A2, A3 = API('v1', 'first release'), API('v2'), API('v3')
PKG = package_key('com.example')
FOO = type_key('Foo', PKG)
RUN = executable_key('run', FOO)


def _read(path):
    return html5lib.parse(path.read_text(encoding='utf-8'), treebuilder='etree',
                          namespaceHTMLElements=False)


def _text(el):
    return ''.join(el.itertext())


def _by_class(root, tag, classname):
    return [e for e in root.iter(tag) if classname in (e.get('class') or '').split()]


def _row(root, name):
    """The cells of the summary table row for `name`."""
    for table in _by_class(root, 'table', 'summary'):
        for tr in table.iter('tr'):
            th = tr.find('th')
            if th is not None and _text(th) == name:
                return [td.text for td in tr.findall('td')]
    return None


def _values(apis, values):
    return APIMap.of(apis, values)


def _same(apis, value):
    return APIMap.of(apis, dict((api, value) for api in apis))


def _deprecate_run(reporter, apis):
    reporter.comparing(Position.of(PKG), _same(apis, Element('package', 'com.example')))
    reporter.comparing(Position.of(FOO), _same(apis, Element('class', 'Foo', 'public class Foo')))
    reporter.comparing(Position.of(RUN), _same(apis, Element('method', 'run', 'public void run()')))
    reporter.report_different_annotations(
        Position.of(RUN),
        _values(apis, {apis[0]: (), apis[-1]: (Annotation('Deprecated'),)}))
    reporter.completed(Position.of(RUN), False)
    reporter.completed(Position.of(FOO), False)
    reporter.completed(Position.of(PKG), False)
    reporter.completed_all(False)


def test_method_gains_annotation(tmp_path):
    _deprecate_run(HtmlReporter([A1, A2], tmp_path), [A1, A2])

    page = _read(tmp_path / 'com' / 'example' / 'Foo.html')
    (member,) = [s for s in page.iter('section') if s.get('id') == 'run()']
    glyph = member.find('h3/span')
    assert glyph.get('class') == 'diff'
    assert _text(glyph) == '≠'
    (dd,) = member.iter('dd')
    assert _text(dd) == '(missing) → @Deprecated'
    assert _row(page, 'run()')[1] == '1'

    package = _read(tmp_path / 'com' / 'example' / 'package-summary.html')
    row = _row(package, 'Foo')
    assert row[1] == '1'
    assert row[-1] == '1'
    assert row[0] is None


def test_pages_and_index_written(tmp_path):
    config = ReportConfig(title='Example')
    _deprecate_run(HtmlReporter([A1, A2], tmp_path, config), [A1, A2])

    assert (tmp_path / 'apidiff.css').is_file()
    page = _read(tmp_path / 'com' / 'example' / 'Foo.html')
    assert _text(page.find('.//title')) == 'Example: Class Foo'
    (link,) = [e for e in page.iter('link') if e.get('rel') == 'stylesheet']
    assert link.get('href') == '../../apidiff.css'

    index = _read(tmp_path / 'index.html')
    assert _text(index.find('.//title')) == 'Example'
    apis = [_text(li) for li in _by_class(index, 'section', 'apis')[0].iter('li')]
    assert apis == ['v1: first release', 'v2']
    hrefs = [a.get('href') for a in index.iter('a')]
    assert 'com/example/package-summary.html' in hrefs
    assert _row(index, 'com.example')[1] == '1'


def test_unchanged_report(tmp_path):
    reporter = HtmlReporter([A1, A2], tmp_path)
    reporter.comparing(Position.of(PKG), _same([A1, A2], Element('package', 'com.example')))
    reporter.completed(Position.of(PKG), True)
    reporter.completed_all(True)
    page = _read(tmp_path / 'com' / 'example' / 'package-summary.html')
    (summary,) = _by_class(page, 'section', 'summary')
    assert 'No differences found.' in _text(summary)
    (glyph,) = _by_class(page, 'span', 'same')
    assert _text(glyph) == '='


def test_added_member(tmp_path):
    reporter = HtmlReporter([A1, A2], tmp_path)
    field = variable_key('size', FOO)
    reporter.comparing(Position.of(FOO), _same([A1, A2], Element('class', 'Foo')))
    reporter.comparing(Position.of(field), _values([A1, A2], {A2: Element('field', 'size')}))
    reporter.report_missing(Position.of(field), {A1})
    reporter.completed(Position.of(field), False)
    reporter.completed(Position.of(FOO), False)

    page = _read(tmp_path / 'com' / 'example' / 'Foo.html')
    (member,) = [s for s in page.iter('section') if s.get('id') == 'size']
    assert _text(member.find('h3/span')) == '+'
    (missing,) = _by_class(member, 'span', 'missing')
    assert missing.get('class') == 'missing missing-add'
    assert _text(missing) == 'Only in v2; missing in v1'
    assert _row(page, 'size')[0] == '1'


def test_three_instances_partial(tmp_path):
    apis = [A1, A2, A3]
    reporter = HtmlReporter(apis, tmp_path)
    field = variable_key('size', FOO)
    reporter.comparing(Position.of(FOO), _same(apis, Element('class', 'Foo')))
    reporter.comparing(Position.of(field), _values(apis, {A3: Element('field', 'size')}))
    reporter.report_missing(Position.of(field), {A1, A2})
    reporter.completed(Position.of(field), False)
    reporter.completed(Position.of(FOO), False)

    page = _read(tmp_path / 'com' / 'example' / 'Foo.html')
    (member,) = [s for s in page.iter('section') if s.get('id') == 'size']
    assert _text(member.find('h3/span')) == '①'
    # v2 is the reference instance and lacks the field
    assert _row(page, 'size')[0] == '1'


def test_doc_comment_diff(tmp_path):
    reporter = HtmlReporter([A1, A2], tmp_path)
    reporter.comparing(Position.of(FOO), _same([A1, A2], Element('class', 'Foo')))
    reporter.report_different_raw_doc_comments(
        Position.of(FOO), _values([A1, A2], {A1: 'A\nB\nC', A2: 'A\nX\nC'}))
    reporter.report_different_api_descriptions(
        Position.of(FOO), _values([A1, A2], {A1: '<p>Hello world</p>',
                                             A2: '<p>Hello there world</p>'}))
    reporter.completed(Position.of(FOO), False)

    page = _read(tmp_path / 'com' / 'example' / 'Foo.html')
    assert _by_class(page, 'div', 'rawDocComments')
    (added,) = _by_class(page, 'span', 'diff-html-added')
    assert _text(added) == 'there '
    row = _row(page, 'Foo')
    assert row[4] == '1'
    assert row[6] == '1'
    assert row[1] is None


def test_doc_files_section(tmp_path):
    reporter = HtmlReporter([A1, A2], tmp_path)
    pos = Position.of(PKG).doc_file('overview.html')
    reporter.comparing(Position.of(PKG), _same([A1, A2], Element('package', 'com.example')))
    files = _values([A1, A2], {A1: DocFile('overview.html', '<p>old</p>'),
                               A2: DocFile('overview.html', '<p>new</p>')})
    reporter.comparing(pos, files)
    reporter.report_different_doc_files(pos, files)
    reporter.completed(pos, False)
    reporter.completed(Position.of(PKG), False)

    page = _read(tmp_path / 'com' / 'example' / 'package-summary.html')
    (section,) = _by_class(page, 'section', 'doc-files')
    assert 'overview.html' in _text(section)
    assert _by_class(section, 'span', 'diff-html-removed')


def test_module_directives(tmp_path):
    mod = module_key('com.example')
    reporter = HtmlReporter([A1, A2], tmp_path)
    pos = Position.of(mod).directive(RelativeKind.MODULE_EXPORTS, package_key('com.example', mod))
    reporter.comparing(Position.of(mod), _same([A1, A2], Element('module', 'com.example')))
    reporter.comparing(pos, _values([A1, A2], {A1: 'exports com.example'}))
    reporter.report_missing(pos, {A2})
    reporter.completed(pos, False)
    reporter.completed(Position.of(mod), False)
    reporter.completed_all(False)

    page = _read(tmp_path / 'com.example' / 'module-summary.html')
    (section,) = _by_class(page, 'section', 'directives')
    assert 'exports com.example' in _text(section)
    assert _row(page, 'com.example')[2] == '1'


def test_routing_is_stable(tmp_path):
    reporter = HtmlReporter([A1, A2], tmp_path)
    page = reporter.route_for(Position.of(RUN))
    assert reporter.route_for(Position.of(RUN).parameter(0)) is page
    assert reporter.route_for(Position.of(FOO)) is page
    assert reporter.route_for(Position.of(PKG)) is not page


def test_second_report_is_an_error(tmp_path):
    reporter = HtmlReporter([A1, A2], tmp_path)
    values = _same([A1, A2], Element('class', 'Foo'))
    reporter.comparing(Position.of(FOO), values)
    with pytest.raises(ReportError):
        reporter.comparing(Position.of(FOO), values)
    reporter.report_different_modifiers(Position.of(FOO), values)
    with pytest.raises(ReportError):
        reporter.report_different_modifiers(Position.of(FOO), values)


def test_completed_page_is_released(tmp_path):
    reporter = HtmlReporter([A1, A2], tmp_path)
    reporter.comparing(Position.of(FOO), _same([A1, A2], Element('class', 'Foo')))
    reporter.completed(Position.of(FOO), True)
    with pytest.raises(ReportError):
        reporter.comparing(Position.of(RUN), _same([A1, A2], Element('method', 'run')))


def test_surrogate_reference_in_description(tmp_path):
    reporter = HtmlReporter([A1, A2], tmp_path)
    reporter.comparing(Position.of(FOO), _same([A1, A2], Element('class', 'Foo')))
    reporter.report_different_api_descriptions(
        Position.of(FOO), _values([A1, A2], {A1: '<p>a</p>', A2: '<p>a &#xD800; b</p>'}))
    reporter.completed(Position.of(FOO), False)

    page = _read(tmp_path / 'com' / 'example' / 'Foo.html')
    (added,) = _by_class(page, 'span', 'diff-html-added')
    assert _text(added) == '\ufffd b'
    assert _row(page, 'Foo')[6] == '1'


def test_unencodable_page_aborts(tmp_path, caplog):
    reporter = HtmlReporter([A1, A2], tmp_path)
    reporter.comparing(Position.of(FOO), _same([A1, A2], Element('class', 'Foo', 'class Foo\ud800')))
    with caplog.at_level(logging.ERROR):
        with pytest.raises(Abort):
            reporter.completed(Position.of(FOO), True)
    assert 'cannot encode' in caplog.text
    assert not (tmp_path / 'com' / 'example' / 'Foo.html').exists()


def test_page_cannot_complete_before_enclosed_pages(tmp_path):
    reporter = HtmlReporter([A1, A2], tmp_path)
    reporter.comparing(Position.of(PKG), _same([A1, A2], Element('package', 'com.example')))
    reporter.comparing(Position.of(FOO), _same([A1, A2], Element('class', 'Foo')))
    with pytest.raises(ReportError) as excinfo:
        reporter.completed(Position.of(PKG), True)
    assert 'Foo' in str(excinfo.value)
    assert not (tmp_path / 'com' / 'example' / 'package-summary.html').exists()


def test_broken_chain_aborts(tmp_path, caplog):
    reporter = HtmlReporter([A1, A2], tmp_path)
    orphan = ElementKey(ElementKind.EXECUTABLE, 'run', None, (primitive_type('int'),))
    with caplog.at_level(logging.ERROR):
        with pytest.raises(Abort):
            reporter.comparing(Position.of(orphan), _same([A1, A2], 'x'))
    assert 'enclosing chain is broken' in caplog.text


def test_unwritable_output_aborts(tmp_path, caplog):
    (tmp_path / 'com').write_text('not a directory')
    reporter = HtmlReporter([A1, A2], tmp_path)
    reporter.comparing(Position.of(FOO), _same([A1, A2], Element('class', 'Foo')))
    with caplog.at_level(logging.ERROR):
        with pytest.raises(Abort):
            reporter.completed(Position.of(FOO), True)
    assert str(tmp_path / 'com') in caplog.text


def test_output_dir_is_a_file(tmp_path):
    out = tmp_path / 'out'
    out.write_text('')
    with pytest.raises(Abort):
        HtmlReporter([A1, A2], out)


def test_needs_two_instances(tmp_path):
    with pytest.raises(ValueError):
        HtmlReporter([A1], tmp_path)


def test_custom_stylesheet(tmp_path):
    css = tmp_path / 'custom.css'
    css.write_text('body { color: black; }')
    out = tmp_path / 'report'
    reporter = HtmlReporter([A1, A2], out, ReportConfig(stylesheet=css))
    reporter.completed_all(True)
    assert (out / 'custom.css').read_text() == 'body { color: black; }'
    index = _read(out / 'index.html')
    assert [e.get('href') for e in index.iter('link')] == ['custom.css']


def test_notes(tmp_path):
    notes = Notes.parse(['https://bugs.example.org/7  Foo rework\n', 'com.example.Foo\n'])
    reporter = HtmlReporter([A1, A2], tmp_path, notes=notes)
    reporter.comparing(Position.of(FOO), _same([A1, A2], Element('class', 'Foo')))
    reporter.completed(Position.of(FOO), True)
    reporter.completed_all(True)

    page = _read(tmp_path / 'com' / 'example' / 'Foo.html')
    (span,) = _by_class(page, 'span', 'notes')
    assert _text(span) == 'See Foo rework.'
    index = _read(tmp_path / 'index.html')
    (section,) = _by_class(index, 'section', 'notes')
    assert [a.get('href') for a in section.iter('a')] == [
        'https://bugs.example.org/7', 'com/example/Foo.html']


def test_base_reporter_ignores_events():
    reporter = Reporter()
    reporter.comparing(Position.of(FOO), None)
    reporter.report_different_values(Position.of(FOO), None)
    reporter.completed(Position.of(FOO), True)
    reporter.completed_all(True)


def test_log_and_multiplex(tmp_path, caplog):
    log = logging.getLogger('apidiff.test')
    html = HtmlReporter([A1, A2], tmp_path)
    reporter = MultiplexReporter([html, LogReporter([A1, A2], log)])
    with caplog.at_level(logging.INFO, logger='apidiff.test'):
        _deprecate_run(reporter, [A1, A2])
    assert 'different annotations: v1: ; v2: @Deprecated' in caplog.text
    assert (tmp_path / 'index.html').is_file()
