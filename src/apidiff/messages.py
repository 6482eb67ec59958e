# -*- coding: utf-8 -*-
"""
User-visible strings used in generated pages.
"""

_MESSAGES = {
    'index.title': 'API Comparison',
    'index.apis': 'Compared APIs',
    'index.notes': 'Notes',

    'heading.module': 'Module',
    'heading.package': 'Package',
    'heading.class': 'Class',
    'heading.interface': 'Interface',
    'heading.enum': 'Enum',
    'heading.record': 'Record',
    'heading.annotation-type': 'Annotation Type',
    'heading.mixed': 'Type',
    'heading.unknown': 'Type',

    'heading.modules': 'Modules',
    'heading.packages': 'Packages',
    'heading.types': 'Types',
    'heading.fields': 'Fields',
    'heading.constructors': 'Constructors',
    'heading.methods': 'Methods',
    'heading.files': 'Files',
    'heading.directives': 'Directives',
    'heading.serial': 'Serialized Form',

    'nav.index': 'Index',

    'facet.modifiers': 'Modifiers',
    'facet.kinds': 'Kind',
    'facet.types': 'Type',
    'facet.thrown_types': 'Thrown types',
    'facet.superinterfaces': 'Superinterfaces',
    'facet.permitted_subclasses': 'Permitted subclasses',
    'facet.annotations': 'Annotations',
    'facet.annotation_values': 'Annotation values',
    'facet.directives': 'Directive',
    'facet.raw_doc_comments': 'Doc comment',
    'facet.api_descriptions': 'Description',
    'facet.doc_files': 'Doc file',
    'facet.values': 'Value',
    'facet.type_parameters': 'Type parameters',

    'element.onlyInMissingIn': 'Only in {0}; missing in {1}',
    'notes.prefix': 'See',

    'textdiffs.comparing': 'Comparing {0} with {1}',
    'textdiffs.not-in-only-in': 'Not in {0}; only in {1}',
    'textdiffs.only-in-not-in': 'Only in {0}; not in {1}',
    'htmldiffs.comparing': 'Comparing {0} with {1}',
    'htmldiffs.not-in-only-in': 'Not in {0}; only in {1}',
    'htmldiffs.only-in-not-in': 'Only in {0}; not in {1}',
    'htmldiffs.change.tag': '<b>{0}</b> changed to <b>{1}</b>',
    'htmldiffs.change.attr-added': 'Attribute <b>{0}</b> added: {1}',
    'htmldiffs.change.attr-removed': 'Attribute <b>{0}</b> removed: {1}',
    'htmldiffs.change.attr-changed': 'Attribute <b>{0}</b> changed from {1} to {2}',

    'summary.heading': 'Summary',
    'summary.caption': 'Differences',
    'summary.no-differences': 'No differences found.',
    'summary.elements': 'Elements',
    'summary.comments': 'Comments',
    'summary.descriptions': 'Descriptions',
    'summary.added': 'Added',
    'summary.changed': 'Changed',
    'summary.removed': 'Removed',
    'summary.total': 'Total',
}


def get_string(key, *args):
    """Return the message for `key`, formatted with `args`."""
    text = _MESSAGES[key]
    return text.format(*args) if args else text
