# -*- coding: utf-8 -*-
"""
Report pages.

Each page owns one element key (the index page owns none) and collects
everything reported for the positions routed to it.  A page is rendered
exactly once, when the position for its own key completes.
"""
import logging
import os

from genshi.builder import tag
from genshi.core import QName

from .errors import Abort, ReportError
from .html_differ import HtmlDiffBuilder
from .links import INDEX_PAGE, Links, anchor_for, display_name, path_for
from .messages import get_string
from .model import (DIRECTIVE_KINDS, SERIAL_KINDS, ElementKey, ElementKind,
                    Position, RelativeKind, describe)
from .pairwise import build_alternatives, name_list
from .results import CountKind, ResultKind, ResultTable, result_kind
from .text_differ import TextDiffBuilder

logger = logging.getLogger(__name__)

FACETS = (
    'modifiers', 'kinds', 'types', 'thrown_types', 'superinterfaces',
    'permitted_subclasses', 'annotations', 'annotation_values', 'directives',
    'raw_doc_comments', 'api_descriptions', 'doc_files', 'values',
    'type_parameters',
)

# Counted by the diff builders when the page is rendered
UNCOUNTED_FACETS = frozenset(['raw_doc_comments', 'api_descriptions', 'doc_files'])

# Shown by their own sections rather than in the list of differences
_SECTION_FACETS = UNCOUNTED_FACETS

_TYPE_HEADINGS = frozenset(['class', 'interface', 'enum', 'record', 'annotation-type'])


def position_label(pos):
    """Describe the relative part of a position, such as ``parameter 0``."""
    parts = []
    for kind, index in pos.relative_chain():
        label = kind.value.replace('-', ' ')
        if index is not None:
            if isinstance(index, ElementKey):
                index = display_name(index)
            label = '%s %s' % (label, index)
        parts.append(label)
    return ' / '.join(parts)


def missing_info(apis, api_map, missing_apis, glyph):
    """The "Only in ...; missing in ..." note for a partially present position."""
    only_in = name_list(a for a in apis if api_map is not None and a in api_map)
    missing_in = name_list(a for a in apis if a in missing_apis)
    cls = 'missing'
    if glyph.caption_class:
        cls += ' ' + glyph.caption_class
    return tag.span(get_string('element.onlyInMissingIn', only_in, missing_in), class_=cls)


def signature_block(apis, api_map, config):
    """The signature of an element: plain if all instances agree, otherwise
    one alternative per instance."""
    if not api_map:
        return tag()
    texts = set(describe(v) for v in api_map.values())
    if len(texts) == 1:
        return tag.pre(texts.pop(), class_='signature')
    return tag.div(build_alternatives(apis, api_map, describe, config), class_='signature')


def differences_list(apis, differences, config):
    """Render reported differences as a definition list.

    `differences` is a list of (facet, position, api_map) tuples."""
    if not differences:
        return tag()
    dl = tag.dl(class_='differences')
    for facet, pos, api_map in differences:
        label = get_string('facet.' + facet)
        rel = position_label(pos)
        if rel:
            label = '%s (%s)' % (label, rel)
        dl.append(tag.dt(label))
        dl.append(tag.dd(build_alternatives(apis, api_map, describe, config)))
    return dl


def _diff_block(builder, api_map, counter, css_class):
    contents = builder.build(api_map, counter)
    if not contents:
        return tag()
    return tag.div(*contents, class_=css_class)


def _attr_map(api_map, name):
    if api_map is None:
        return None
    return api_map.map(lambda api, v: getattr(v, name, None))


class PageReporter(object):
    """Accumulates the results for one page and renders it."""

    kind_class = 'page'

    def __init__(self, reporter, key):
        self.reporter = reporter
        self.key = key
        self.file = path_for(key) if key is not None else INDEX_PAGE
        self.links = Links(self.file)
        self.result_table = ResultTable()
        self.api_maps = {}
        self.results = {}
        self.missing = {}
        self.different = dict((facet, {}) for facet in FACETS)
        # Glyphs of enclosed elements that have pages of their own
        self.enclosed = {}
        # Keys of enclosed pages that have been opened but not completed
        self.open_children = set()

    def __repr__(self):
        return '<%s %s>' % (type(self).__name__, self.file)

    @property
    def apis(self):
        return self.reporter.apis

    @property
    def config(self):
        return self.reporter.config

    @property
    def position(self):
        return Position.of(self.key)

    # -- accumulating results

    def comparing(self, pos, api_map):
        if pos in self.api_maps:
            raise ReportError('position already reported: %r' % (pos,))
        self.api_maps[pos] = api_map

    def completed(self, pos, equal):
        """Record a result; returns True if it completes this page."""
        if pos in self.results:
            raise ReportError('position already completed: %r' % (pos,))
        self.results[pos] = equal
        if not (pos.is_element() and pos.element_key() == self.key):
            return False
        if self.open_children:
            raise ReportError('%r completed before its enclosed pages: %s' % (
                self.key, ', '.join(sorted(display_name(k) for k in self.open_children))))
        return True

    def child_opened(self, key):
        self.open_children.add(key)

    def child_completed(self, key, equal, glyph, totals):
        self.open_children.discard(key)
        self.results[Position.of(key)] = equal
        self.enclosed[key] = glyph
        self.result_table.add_all(key, totals)

    def report_missing(self, pos, missing_apis):
        if pos in self.missing:
            raise ReportError('missing instances already reported: %r' % (pos,))
        self.missing[pos] = frozenset(missing_apis)
        ref, focus = self.apis[-2], self.apis[-1]
        if ref in missing_apis and focus not in missing_apis:
            self.result_table.inc(pos.element_key(), CountKind.ELEMENT_ADDED)
        elif focus in missing_apis and ref not in missing_apis:
            self.result_table.inc(pos.element_key(), CountKind.ELEMENT_REMOVED)

    def report_different(self, facet, pos, api_map):
        table = self.different[facet]
        if pos in table:
            raise ReportError('%s already reported: %r' % (facet, pos))
        table[pos] = api_map
        if facet in UNCOUNTED_FACETS:
            return
        if self.apis[-2] in api_map and self.apis[-1] in api_map:
            self.result_table.inc(pos.element_key(), CountKind.ELEMENT_CHANGED)

    def glyph(self, pos):
        key = pos.element_key() if pos.is_element() else None
        if key is not None and key in self.enclosed:
            return self.enclosed[key]
        return result_kind(self.apis, self.api_maps.get(pos), self.results.get(pos))

    def differences_for(self, key):
        """All reported differences for `key` and its type parameters."""
        found = []
        for facet in FACETS:
            if facet in _SECTION_FACETS:
                continue
            for pos, api_map in self.different[facet].items():
                ek = pos.element_key()
                if ek == key or (ek.kind is ElementKind.TYPE_PARAMETER and ek.enclosing == key):
                    found.append((facet, pos, api_map))
        found.sort(key=lambda d: (d[1].sort_key(), d[0]))
        return found

    # -- writing

    def write(self):
        path = os.path.join(self.reporter.out_dir, *self.file.split('/'))
        content = self.render()
        self.reporter.write_file(path, content)
        logger.debug('wrote %s', path)

    def render(self):
        html = tag.html(self.build_head(), self.build_body(), lang='en')
        return html.generate().render('html', doctype='html5', encoding=None)

    def title(self):
        raise NotImplementedError

    def head_title(self):
        if self.config.title:
            return '%s: %s' % (self.config.title, self.title())
        return self.title()

    def build_head(self):
        head = tag.head(tag.meta(charset='utf-8'), tag.title(self.head_title()),
                        tag.meta(name='generator', content='apidiff'))
        for stylesheet in self.reporter.stylesheets:
            head.append(tag.link(rel='stylesheet', href=self.links.path(stylesheet)))
        return head

    def build_body(self):
        main = tag.main(
            self.build_heading(),
            self.build_element(),
            self.build_doc_comments(self.position),
            self.build_api_descriptions(self.position),
            *self.build_sections())
        main.append(self.build_result_table())
        return tag.body(self.build_nav('header'), main, self.build_nav('footer'),
                        class_=self.kind_class)

    def build_nav(self, kind):
        index = get_string('nav.index')
        if self.key is None:
            item = index
        else:
            item = tag.a(index, href=self.links.path(INDEX_PAGE))
        info = ' : '.join(api.name for api in self.apis)
        bar = tag.div(tag.div(info, class_='info'), tag.nav(tag.ul(tag.li(item))),
                      class_='bar')
        return getattr(tag, kind)(bar)

    def build_heading(self):
        raise NotImplementedError

    def build_element(self):
        pos = self.position
        return tag.div(self.glyph(pos).to_content(), ' ',
                       self.build_missing_info(pos),
                       self.build_notes(self.key),
                       self.build_signature(self.key),
                       differences_list(self.apis, self.differences_for(self.key), self.config),
                       class_='element')

    def build_missing_info(self, pos):
        if pos not in self.missing:
            return tag()
        return missing_info(self.apis, self.api_maps.get(pos), self.missing[pos],
                            self.glyph(pos))

    def build_notes(self, key):
        notes = self.reporter.notes
        if notes is None or key.kind is ElementKind.TYPE_PARAMETER:
            return tag()
        entries = notes.get_entries(key)
        if not entries:
            return tag()
        ordered = sorted(entries, key=lambda e: (e.description or '', e.uri))
        for e in ordered:
            if not entries[e]:
                self.reporter.notes_table.add(e, key)
        span = tag.span(get_string('notes.prefix'), ' ', class_='notes')
        for i, e in enumerate(ordered):
            if i:
                span.append(', ')
            span.append(tag.a(e.description, href=e.uri))
        span.append('.')
        return span

    def build_signature(self, key):
        return signature_block(self.apis, self.api_maps.get(Position.of(key)), self.config)

    def _counter(self, pos):
        key = pos.element_key()
        return lambda ck: self.result_table.inc(key, ck)

    def build_doc_comments(self, pos):
        if not self.config.compare_doc_comments:
            return tag()
        api_map = self.different['raw_doc_comments'].get(pos)
        if api_map is None:
            api_map = _attr_map(self.api_maps.get(pos), 'doc_comment')
        if not api_map:
            return tag()
        b = TextDiffBuilder(self.apis, 'comment', self.config)
        return _diff_block(b, api_map, self._counter(pos), 'rawDocComments')

    def build_api_descriptions(self, pos):
        if not self.config.compare_api_descriptions:
            return tag()
        api_map = self.different['api_descriptions'].get(pos)
        if api_map is None:
            api_map = _attr_map(self.api_maps.get(pos), 'api_description')
        if not api_map:
            return tag()
        if self.config.compare_api_descriptions_as_text:
            b = TextDiffBuilder(self.apis, 'description', self.config)
        else:
            b = HtmlDiffBuilder(self.apis, 'description', self.config)
        return _diff_block(b, api_map, self._counter(pos), 'apiDescriptions')

    def build_sections(self):
        return []

    def element_keys(self):
        """Keys of the elements on or below this page, other than its own."""
        keys = set(self.enclosed)
        for pos in list(self.api_maps) + list(self.results):
            if pos.is_element():
                keys.add(pos.element_key())
        keys.discard(self.key)
        return sorted(keys)

    def build_enclosed_list(self, heading_key, keys):
        items = []
        for key in keys:
            glyph = self.glyph(Position.of(key))
            if glyph is ResultKind.SAME:
                continue
            items.append(tag.li(tag.span(glyph.to_content(), ' ', self.links.link(key))))
        if not items:
            return tag()
        return tag.section(tag.h2(get_string(heading_key)), tag.ul(*items),
                           class_='enclosed')

    def build_doc_files(self):
        positions = sorted(p for p in set(self.api_maps) | set(self.results)
                           if p.is_kind(RelativeKind.DOC_FILE))
        if not positions:
            return tag()
        ul = tag.ul()
        for pos in positions:
            li = tag.li(self.glyph(pos).to_content(), ' ', self.build_missing_info(pos),
                        tag.span(pos.index, class_='doc-file'))
            api_map = self.different['doc_files'].get(pos)
            if api_map is None:
                api_map = self.api_maps.get(pos)
            content = _attr_map(api_map, 'content')
            if content and self.config.compare_api_descriptions:
                b = HtmlDiffBuilder(self.apis, 'description', self.config)
                li.append(_diff_block(b, content, self._counter(pos), 'apiDescriptions'))
            ul.append(li)
        return tag.section(tag.h2(get_string('heading.files')), ul, class_='doc-files')

    def build_result_table(self):
        section = tag.section(tag.h2(get_string('summary.heading')), class_='summary')
        if self.result_table.is_empty():
            section.append(get_string('summary.no-differences'))
        else:
            section.append(self.result_table.to_content(self.links))
        return section


def _major(heading_key, name):
    return tag.h1(get_string(heading_key), ' ', name)


def _minor(heading_key, content):
    return tag.div(get_string(heading_key), ' ', content, class_='enclosing')


class ModulePageReporter(PageReporter):

    kind_class = 'module'

    def title(self):
        return '%s %s' % (get_string('heading.module'), self.key.name)

    def build_heading(self):
        return tag.div(_major('heading.module', self.key.name), class_='pageHeading')

    def build_sections(self):
        packages = [k for k in self.element_keys() if k.kind is ElementKind.PACKAGE]
        return [self.build_enclosed_list('heading.packages', packages),
                self.build_directives(),
                self.build_doc_files()]

    def build_directives(self):
        positions = sorted(p for p in set(self.api_maps) | set(self.results)
                           | set(self.different['directives'])
                           if p.is_relative() and p.kind in DIRECTIVE_KINDS)
        items = []
        for pos in positions:
            glyph = self.glyph(pos)
            api_map = self.different['directives'].get(pos)
            if glyph is ResultKind.SAME and api_map is None:
                continue
            li = tag.li(glyph.to_content(), ' ', position_label(pos), ' ',
                        self.build_missing_info(pos))
            if api_map is not None:
                li.append(build_alternatives(self.apis, api_map, describe, self.config))
            items.append(li)
        if not items:
            return tag()
        return tag.section(tag.h2(get_string('heading.directives')), tag.ul(*items),
                           class_='directives')


class PackagePageReporter(PageReporter):

    kind_class = 'package'

    def title(self):
        return '%s %s' % (get_string('heading.package'), self.key.name)

    def build_heading(self):
        heading = tag.div(class_='pageHeading')
        module = self.key.enclosing
        if module is not None:
            heading.append(_minor('heading.module', self.links.link(module, module.name)))
        heading.append(_major('heading.package', self.key.name))
        return heading

    def build_sections(self):
        types = [k for k in self.element_keys() if k.kind is ElementKind.TYPE]
        return [self.build_enclosed_list('heading.types', types),
                self.build_doc_files()]


class TypePageReporter(PageReporter):

    kind_class = 'type'

    def type_heading_key(self):
        api_map = self.api_maps.get(self.position)
        if not api_map:
            return 'heading.unknown'
        kinds = set(getattr(v, 'kind', None) for v in api_map.values())
        if len(kinds) > 1:
            return 'heading.mixed'
        kind = kinds.pop()
        return 'heading.' + kind if kind in _TYPE_HEADINGS else 'heading.unknown'

    def title(self):
        return '%s %s' % (get_string(self.type_heading_key()), display_name(self.key))

    def build_heading(self):
        heading = tag.div(class_='pageHeading')
        k = self.key.enclosing
        while k is not None and k.kind is ElementKind.TYPE:
            k = k.enclosing
        if k is not None:
            module = k.enclosing
            if module is not None:
                heading.append(_minor('heading.module', self.links.link(module, module.name)))
            heading.append(_minor('heading.package', self.links.link(k, k.name)))
        heading.append(_major(self.type_heading_key(), display_name(self.key)))
        return heading

    def build_sections(self):
        keys = self.element_keys()
        types = [k for k in keys if k.kind is ElementKind.TYPE]
        fields = [k for k in keys if k.kind is ElementKind.VARIABLE]
        constructors = [k for k in keys if k.kind is ElementKind.EXECUTABLE
                        and k.member_kind == 'constructor']
        methods = [k for k in keys if k.kind is ElementKind.EXECUTABLE
                   and k.member_kind != 'constructor']
        return [self.build_enclosed_list('heading.types', types),
                self.build_members('heading.fields', fields),
                self.build_members('heading.constructors', constructors),
                self.build_members('heading.methods', methods),
                self.build_serialized_form()]

    def build_members(self, heading_key, keys):
        sections = []
        for key in keys:
            member = self.build_member(key)
            if member is not None:
                sections.append(member)
        if not sections:
            return tag()
        return tag.section(tag.h2(get_string(heading_key)), *sections, class_='enclosed')

    def build_member(self, key):
        pos = Position.of(key)
        glyph = self.glyph(pos)
        differences = self.differences_for(key)
        docs = self.build_doc_comments(pos)
        descriptions = self.build_api_descriptions(pos)
        if (glyph is ResultKind.SAME and not differences
                and not docs.children and not descriptions.children):
            return None
        return tag.section(
            tag.h3(glyph.to_content(), ' ', display_name(key)),
            self.build_missing_info(pos),
            self.build_notes(key),
            self.build_signature(key),
            differences_list(self.apis, differences, self.config),
            docs,
            descriptions,
            id=anchor_for(key), class_='member')

    def build_serialized_form(self):
        positions = sorted(p for p in set(self.api_maps) | set(self.results)
                           if p.is_relative() and p.kind in SERIAL_KINDS)
        if not positions:
            return tag()
        ul = tag.ul()
        for pos in positions:
            li = tag.li(self.glyph(pos).to_content(), ' ', position_label(pos), ' ',
                        self.build_missing_info(pos))
            if pos.kind is RelativeKind.SERIALIZED_FIELD:
                li.attrib |= [(QName('id'), 'serial-field-%s' % pos.index)]
            elif pos.kind is RelativeKind.SERIALIZATION_METHOD:
                li.attrib |= [(QName('id'), 'serial-method-%s' % pos.index)]
            api_map = self.api_maps.get(pos)
            values_differ = self.different['values'].get(pos)
            if values_differ is not None:
                li.append(build_alternatives(self.apis, values_differ, describe, self.config))
            elif api_map and all(isinstance(v, str) for v in api_map.values()):
                if self.config.compare_api_descriptions:
                    b = HtmlDiffBuilder(self.apis, 'description', self.config)
                    li.append(_diff_block(b, api_map, self._counter(pos), 'apiDescriptions'))
            ul.append(li)
        return tag.section(tag.h2(get_string('heading.serial')), ul, class_='serial')


class IndexPageReporter(PageReporter):
    """The root page: the compared instances, top-level elements, notes
    and the summary for the whole run."""

    kind_class = 'index'

    def __init__(self, reporter):
        PageReporter.__init__(self, reporter, None)

    def title(self):
        return self.config.title or get_string('index.title')

    def head_title(self):
        return self.title()

    def build_body(self):
        main = tag.main(tag.h1(self.title()), self.build_apis())
        keys = self.element_keys()
        for heading_key, kind in (('heading.modules', ElementKind.MODULE),
                                  ('heading.packages', ElementKind.PACKAGE),
                                  ('heading.types', ElementKind.TYPE)):
            main.append(self.build_enclosed_list(
                heading_key, [k for k in keys if k.kind is kind]))
        main.append(self.build_notes_index())
        main.append(self.build_result_table())
        return tag.body(self.build_nav('header'), main, self.build_nav('footer'),
                        class_=self.kind_class)

    def build_apis(self):
        items = []
        for api in self.apis:
            text = api.name if api.label is None else '%s: %s' % (api.name, api.label)
            items.append(tag.li(text))
        return tag.section(tag.h2(get_string('index.apis')), tag.ul(*items), class_='apis')

    def build_notes_index(self):
        table = self.reporter.notes_table
        if table.is_empty():
            return tag()
        return tag.section(tag.h2(get_string('index.notes')), table.to_content(),
                           class_='notes')

    def glyph(self, pos):
        return self.enclosed.get(pos.element_key(), ResultKind.UNKNOWN)


def page_class_for(key):
    kind = key.kind
    if kind is ElementKind.MODULE:
        return ModulePageReporter
    elif kind is ElementKind.PACKAGE:
        return PackagePageReporter
    elif kind is ElementKind.TYPE:
        return TypePageReporter
    logger.error('no page kind for %r', key)
    raise Abort('no page kind for %r' % (key,))
