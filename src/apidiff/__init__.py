# -*- coding: utf-8 -*-
"""
    apidiff
    ~~~~~~~

    Renders the comparison of two or more instances of an API as a tree of
    HTML pages.  Every comparable unit of the API is addressed by an
    element key, which fixes the page it is shown on:

    >>> from apidiff import module_key, package_key, type_key, path_for
    >>> pkg = package_key('java.util', module_key('java.base'))
    >>> path_for(type_key('Entry', type_key('Map', pkg)))
    'java.base/java/util/Map.Entry.html'

    A comparison drives an `HtmlReporter` through the `Reporter` callbacks,
    one position at a time, and the pages are written as they complete.
"""
from .config import ReportConfig
from .errors import Abort, ReportError
from .html_differ import HtmlDiffBuilder, diff_html
from .links import Links, anchor_for, page_key_for, path_for
from .model import (API, APIMap, Annotation, DocFile, Element, ElementKey,
                    ElementKind, Position, RelativeKind, TypeKey, array_type,
                    declared_type, executable_key, module_key, package_key,
                    primitive_type, type_key, type_parameter_key, type_variable,
                    variable_key, wildcard_type)
from .notes import Notes
from .pairwise import PairwiseDiffBuilder, build_alternatives, group_instances
from .reporter import HtmlReporter, LogReporter, MultiplexReporter, Reporter
from .results import CountKind, ResultKind
from .text_differ import SideBySideDiff, TextDiffBuilder

__all__ = [
    'API', 'APIMap', 'Abort', 'Annotation', 'CountKind', 'DocFile', 'Element',
    'ElementKey', 'ElementKind', 'HtmlDiffBuilder', 'HtmlReporter', 'Links',
    'LogReporter', 'MultiplexReporter', 'Notes', 'PairwiseDiffBuilder',
    'Position', 'RelativeKind', 'ReportConfig', 'ReportError', 'Reporter',
    'ResultKind', 'SideBySideDiff', 'TextDiffBuilder', 'TypeKey',
    'anchor_for', 'array_type', 'build_alternatives', 'declared_type',
    'diff_html', 'executable_key', 'group_instances', 'module_key',
    'package_key', 'page_key_for', 'path_for', 'primitive_type', 'type_key',
    'type_parameter_key', 'type_variable', 'variable_key', 'wildcard_type',
]
