# -*- coding: utf-8 -*-
"""
Reporters receive the results of comparing the instances of an API, one
position at a time.

The comparison walks the elements of the API depth first.  For each
position it calls `comparing` with the per-instance values, then any of
the ``report_*`` methods, and finally `completed`.  `completed_all` is
called once when the walk is over.
"""
import logging
import os
import pkgutil
import shutil

from .config import ReportConfig
from .errors import Abort, ReportError
from .links import INDEX_PAGE, Links, page_key_for
from .model import describe
from .notes import NotesTable
from .pages import FACETS, IndexPageReporter, page_class_for
from .pairwise import name_list

logger = logging.getLogger(__name__)


class Reporter(object):
    """Receives comparison results.  All methods do nothing by default."""

    def comparing(self, pos, api_map):
        pass

    def completed(self, pos, equal):
        pass

    def completed_all(self, equal):
        pass

    def report_missing(self, pos, missing_apis):
        pass

    def report_different(self, facet, pos, api_map):
        pass

    def report_different_modifiers(self, pos, api_map):
        self.report_different('modifiers', pos, api_map)

    def report_different_kinds(self, pos, api_map):
        self.report_different('kinds', pos, api_map)

    def report_different_types(self, pos, api_map):
        self.report_different('types', pos, api_map)

    def report_different_thrown_types(self, pos, api_map):
        self.report_different('thrown_types', pos, api_map)

    def report_different_superinterfaces(self, pos, api_map):
        self.report_different('superinterfaces', pos, api_map)

    def report_different_permitted_subclasses(self, pos, api_map):
        self.report_different('permitted_subclasses', pos, api_map)

    def report_different_annotations(self, pos, api_map):
        self.report_different('annotations', pos, api_map)

    def report_different_annotation_values(self, pos, api_map):
        self.report_different('annotation_values', pos, api_map)

    def report_different_directives(self, pos, api_map):
        self.report_different('directives', pos, api_map)

    def report_different_raw_doc_comments(self, pos, api_map):
        self.report_different('raw_doc_comments', pos, api_map)

    def report_different_api_descriptions(self, pos, api_map):
        self.report_different('api_descriptions', pos, api_map)

    def report_different_doc_files(self, pos, api_map):
        self.report_different('doc_files', pos, api_map)

    def report_different_values(self, pos, api_map):
        self.report_different('values', pos, api_map)

    def report_different_type_parameters(self, pos, api_map):
        self.report_different('type_parameters', pos, api_map)


class HtmlReporter(Reporter):
    """
    Writes the report as a tree of HTML pages under `out_dir`.

    Positions are routed to the page of the element that owns them.  A
    page is written when the position of its own element completes, and
    its glyph and change counts are then passed up to the page of the
    enclosing element (or to the index page, for top-level elements).
    """

    def __init__(self, apis, out_dir, config=None, notes=None):
        self.apis = list(apis)
        if len(self.apis) < 2:
            raise ValueError('at least two API instances are required')
        self.out_dir = str(out_dir)
        self.config = config or ReportConfig()
        self.notes = notes
        self.notes_table = NotesTable(Links(INDEX_PAGE))
        self.stylesheets = []
        self._pages = {}
        self._completed_keys = set()
        self.index_page = IndexPageReporter(self)
        self.write_stylesheet()

    def write_stylesheet(self):
        self._makedirs(self.out_dir)
        if self.config.stylesheet is not None:
            name = os.path.basename(str(self.config.stylesheet))
            path = os.path.join(self.out_dir, name)
            try:
                shutil.copyfile(str(self.config.stylesheet), path)
            except OSError as e:
                logger.error('cannot copy stylesheet %s to %s: %s',
                             self.config.stylesheet, path, e)
                raise Abort('cannot copy stylesheet: %s' % e) from e
        else:
            name = self.config.default_stylesheet
            path = os.path.join(self.out_dir, name)
            self.write_file(path, pkgutil.get_data('apidiff', 'resources/apidiff.css')
                            .decode('utf-8'))
        self.stylesheets.append(name)

    def _makedirs(self, path):
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            logger.error('cannot create directory %s: %s', path, e)
            raise Abort('cannot create directory %s: %s' % (path, e)) from e

    def write_file(self, path, content):
        try:
            data = content.encode('utf-8')
        except UnicodeEncodeError as e:
            logger.error('cannot encode %s: %s', path, e)
            raise Abort('cannot encode %s: %s' % (path, e)) from e
        self._makedirs(os.path.dirname(path) or '.')
        try:
            with open(path, 'wb') as f:
                f.write(data)
        except OSError as e:
            logger.error('cannot write %s: %s', path, e)
            raise Abort('cannot write %s: %s' % (path, e)) from e

    # -- page registry

    def route_for(self, pos):
        return self.page_for(page_key_for(pos.element_key()))

    def page_for(self, key):
        if key is None:
            return self.index_page
        page = self._pages.get(key)
        if page is None:
            if key in self._completed_keys:
                raise ReportError('page already completed: %r' % (key,))
            parent = self.parent_page(key)
            page = page_class_for(key)(self, key)
            self._pages[key] = page
            parent.child_opened(key)
        return page

    def parent_page(self, key):
        if key.enclosing is None:
            return self.index_page
        return self.page_for(page_key_for(key.enclosing))

    # -- events

    def comparing(self, pos, api_map):
        self.route_for(pos).comparing(pos, api_map)

    def completed(self, pos, equal):
        page = self.route_for(pos)
        if not page.completed(pos, equal):
            return
        key = page.key
        page.write()
        glyph = page.glyph(pos)
        self.parent_page(key).child_completed(key, equal, glyph,
                                              page.result_table.totals())
        self._completed_keys.add(key)
        if self.config.release_completed_pages:
            del self._pages[key]

    def completed_all(self, equal):
        self.index_page.write()
        if self._pages and not self.config.release_completed_pages:
            logger.debug('%d pages still registered', len(self._pages))

    def report_missing(self, pos, missing_apis):
        self.route_for(pos).report_missing(pos, missing_apis)

    def report_different(self, facet, pos, api_map):
        if facet not in FACETS:
            raise ValueError('unknown facet: %s' % facet)
        self.route_for(pos).report_different(facet, pos, api_map)


class LogReporter(Reporter):
    """Logs each reported difference."""

    def __init__(self, apis, logger=logger, level=logging.INFO):
        self.apis = list(apis)
        self.logger = logger
        self.level = level

    def report_missing(self, pos, missing_apis):
        self.logger.log(self.level, '%r: missing in %s', pos,
                        name_list(a for a in self.apis if a in missing_apis))

    def report_different(self, facet, pos, api_map):
        self.logger.log(self.level, '%r: different %s: %s', pos, facet.replace('_', ' '),
                        '; '.join('%s: %s' % (api.name, describe(api_map[api]))
                                  for api in self.apis if api in api_map))

    def completed_all(self, equal):
        self.logger.log(self.level, 'comparison complete: %s',
                        'no differences' if equal else 'differences found')


class MultiplexReporter(Reporter):
    """Forwards every event to each of a list of reporters."""

    def __init__(self, reporters):
        self.reporters = list(reporters)

    def comparing(self, pos, api_map):
        for r in self.reporters:
            r.comparing(pos, api_map)

    def completed(self, pos, equal):
        for r in self.reporters:
            r.completed(pos, equal)

    def completed_all(self, equal):
        for r in self.reporters:
            r.completed_all(equal)

    def report_missing(self, pos, missing_apis):
        for r in self.reporters:
            r.report_missing(pos, missing_apis)

    def report_different(self, facet, pos, api_map):
        for r in self.reporters:
            getattr(r, 'report_different_' + facet)(pos, api_map)
