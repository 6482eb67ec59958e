# -*- coding: utf-8 -*-
"""
Grouping of per-instance values, and comparison of each group against
the group holding the focus (newest) instance.
"""
import logging
from collections import OrderedDict

from genshi.builder import tag

from .config import ReportConfig
from .messages import get_string
from .model import describe

logger = logging.getLogger(__name__)


class _Absent(object):
    """Key shared by all instances that have no value at a position."""

    def __repr__(self):
        return 'ABSENT'


ABSENT = _Absent()


def group_instances(apis, api_map, key_of):
    """
    Partition `apis` by the key of their value in `api_map`.

    Returns an ordered dict mapping each distinct key to the list of
    instances sharing it, in order of first appearance.  Instances with
    no value are grouped under `ABSENT`.
    """
    groups = OrderedDict()
    for api in apis:
        value = api_map.get(api)
        key = ABSENT if value is None else key_of(value)
        groups.setdefault(key, []).append(api)
    return groups


def name_list(apis):
    return ', '.join(api.name for api in apis)


def _ignore(count_kind):
    pass


class PairwiseDiffBuilder(object):
    """
    Renders the differences between groups of equal values.

    Every group other than the one holding the focus instance is compared
    with the focus group, so N distinct values need N - 1 renderings.
    Subclasses provide `key_string` and `build_pair`.
    """

    def __init__(self, apis, config=None):
        self.apis = list(apis)
        if len(self.apis) < 2:
            raise ValueError('at least two API instances are required')
        self.config = config or ReportConfig()

    @property
    def focus(self):
        return self.apis[-1]

    @property
    def reference(self):
        return self.apis[-2]

    def key_string(self, item):
        return item

    def build_pair(self, ref_apis, ref_item, focus_apis, focus_item, counter):
        raise NotImplementedError

    def build(self, api_map, counter=None):
        counter = counter or _ignore
        groups = group_instances(self.apis, api_map, self.key_string)
        focus_group = None
        for members in groups.values():
            if self.focus in members:
                focus_group = members
                break
        if focus_group is None:
            raise RuntimeError('focus group not found')
        focus_item = api_map.get(self.focus)

        contents = []
        for members in groups.values():
            if members is focus_group:
                continue
            item = api_map.get(members[0])
            # Only the comparison against the reference instance is
            # attributed in the counts.
            group_counter = counter if self.reference in members else _ignore
            contents.append(self.build_pair(members, item, focus_group,
                                            focus_item, group_counter))
        logger.debug('%d groups, %d comparisons', len(groups), len(contents))
        return contents

    def titles(self, prefix, ref_apis, focus_apis):
        ref_names = name_list(ref_apis)
        focus_names = name_list(focus_apis)
        return (get_string(prefix + '.comparing', ref_names, focus_names),
                get_string(prefix + '.not-in-only-in', ref_names, focus_names),
                get_string(prefix + '.only-in-not-in', ref_names, focus_names))


def build_alternatives(apis, api_map, render=describe, config=None):
    """
    Render the values of `api_map` inline, one alternative per instance,
    such as ``(missing) → @Deprecated``.
    """
    config = config or ReportConfig()
    outer = tag.span(class_='diffs')
    for i, api in enumerate(apis):
        if i:
            outer.append(tag.span(config.alternative_separator, class_='sep'))
        value = api_map.get(api)
        if value is None or value == () or value == []:
            content = tag.span(config.missing_text, class_='missing')
        else:
            content = render(value)
        outer.append(tag.span(content, class_='api', title=api.name))
    return outer
