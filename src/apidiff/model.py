# -*- coding: utf-8 -*-
"""
Instance-independent addressing of the comparable units of an API.

An `ElementKey` identifies a declaration (module, package, type, member or
type parameter) without reference to any particular instance of the API.
A `Position` locates one comparable facet of a declaration: either the
declaration itself or a chain of relative facets below it, such as an
annotation on a parameter of a method.  An `APIMap` holds the per-instance
values found at one position.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Optional, Tuple


@dataclass(frozen=True)
class API:
    """One named instance of the API being compared."""
    name: str
    label: Optional[str] = field(default=None, compare=False)

    def __str__(self):
        return self.name


class ElementKind(enum.Enum):
    MODULE = 'module'
    PACKAGE = 'package'
    TYPE = 'type'
    EXECUTABLE = 'executable'
    VARIABLE = 'variable'
    TYPE_PARAMETER = 'type-parameter'

    @property
    def order(self):
        return _ELEMENT_KIND_ORDER.index(self)


_ELEMENT_KIND_ORDER = list(ElementKind)


class TypeKind(enum.Enum):
    PRIMITIVE = 'primitive'
    DECLARED = 'declared'
    ARRAY = 'array'
    TYPE_VARIABLE = 'type-variable'
    WILDCARD = 'wildcard'


_TYPE_KIND_ORDER = list(TypeKind)


@total_ordering
@dataclass(frozen=True, eq=True)
class TypeKey:
    """Instance-independent identity of a type use, such as a parameter type."""
    kind: TypeKind
    name: Optional[str] = None
    element: Optional['ElementKey'] = None
    component: Optional['TypeKey'] = None
    extends_bound: Optional['TypeKey'] = None
    super_bound: Optional['TypeKey'] = None

    def sort_key(self):
        def opt(k):
            return () if k is None else k.sort_key()
        return (_TYPE_KIND_ORDER.index(self.kind), self.name or '',
                opt(self.element), opt(self.component),
                opt(self.extends_bound), opt(self.super_bound))

    def __lt__(self, other):
        if not isinstance(other, TypeKey):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self):
        if self.kind is TypeKind.PRIMITIVE or self.kind is TypeKind.TYPE_VARIABLE:
            return self.name
        if self.kind is TypeKind.DECLARED:
            return self.element.name
        if self.kind is TypeKind.ARRAY:
            return '%s[]' % self.component
        if self.kind is TypeKind.WILDCARD:
            s = '?'
            if self.extends_bound is not None:
                s += ' extends %s' % self.extends_bound
            if self.super_bound is not None:
                s += ' super %s' % self.super_bound
            return s
        raise ValueError(self.kind)


def primitive_type(name):
    return TypeKey(TypeKind.PRIMITIVE, name=name)


def declared_type(element_key):
    if element_key.kind not in (ElementKind.TYPE, ElementKind.TYPE_PARAMETER):
        raise ValueError('not a type: %r' % (element_key,))
    return TypeKey(TypeKind.DECLARED, element=element_key)


def array_type(component):
    return TypeKey(TypeKind.ARRAY, component=component)


def type_variable(name):
    return TypeKey(TypeKind.TYPE_VARIABLE, name=name)


def wildcard_type(extends_bound=None, super_bound=None):
    return TypeKey(TypeKind.WILDCARD, extends_bound=extends_bound, super_bound=super_bound)


@total_ordering
@dataclass(frozen=True, eq=True)
class ElementKey:
    """
    Structural identity of a declaration.

    Each key holds its own copy of the key for the enclosing declaration,
    so keys compare and hash by value.  Executables are additionally
    distinguished by their parameter types.
    """
    kind: ElementKind
    name: str
    enclosing: Optional['ElementKey'] = None
    params: Tuple[TypeKey, ...] = ()
    # Finer-grained kind as reported by the provider (e.g. 'method', 'field')
    member_kind: Optional[str] = field(default=None, compare=False)

    def sort_key(self):
        enclosing = () if self.enclosing is None else self.enclosing.sort_key()
        return (self.kind.order, enclosing, self.name,
                tuple(p.sort_key() for p in self.params))

    def __lt__(self, other):
        if not isinstance(other, ElementKey):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def is_member(self):
        return self.kind in (ElementKind.EXECUTABLE, ElementKind.VARIABLE)

    def __repr__(self):
        parts = [self.kind.name, self.name]
        if self.params:
            parts.append('(%s)' % ','.join(str(p) for p in self.params))
        if self.enclosing is not None:
            parts.append('in %r' % (self.enclosing,))
        return 'ElementKey[%s]' % ' '.join(parts)


def module_key(name):
    return ElementKey(ElementKind.MODULE, name)


def package_key(name, module=None):
    if module is not None and module.kind is not ElementKind.MODULE:
        raise ValueError('package must be enclosed by a module: %r' % (module,))
    return ElementKey(ElementKind.PACKAGE, name, module)


def type_key(name, enclosing):
    if enclosing.kind not in (ElementKind.PACKAGE, ElementKind.TYPE):
        raise ValueError('type must be enclosed by a package or type: %r' % (enclosing,))
    return ElementKey(ElementKind.TYPE, name, enclosing)


def executable_key(name, enclosing, params=(), member_kind='method'):
    return ElementKey(ElementKind.EXECUTABLE, name, enclosing, tuple(params), member_kind)


def variable_key(name, enclosing, member_kind='field'):
    return ElementKey(ElementKind.VARIABLE, name, enclosing, (), member_kind)


def type_parameter_key(name, enclosing):
    return ElementKey(ElementKind.TYPE_PARAMETER, name, enclosing)


class RelativeKind(enum.Enum):
    ANNOTATION = 'annotation'
    ANNOTATION_VALUE = 'annotation-value'
    BOUND = 'bound'
    DEFAULT_VALUE = 'default-value'
    DOC_FILE = 'doc-file'
    EXCEPTION = 'exception'
    MODULE_EXPORTS = 'exports'
    MODULE_OPENS = 'opens'
    MODULE_PROVIDES = 'provides'
    MODULE_REQUIRES = 'requires'
    MODULE_USES = 'uses'
    PARAMETER = 'parameter'
    PERMITTED_SUBCLASS = 'permitted-subclass'
    RECORD_COMPONENT = 'record-component'
    RETURN_TYPE = 'return-type'
    SERIAL_VERSION_UID = 'serial-version-uid'
    SERIALIZATION_METHOD = 'serialization-method'
    SERIALIZATION_OVERVIEW = 'serialization-overview'
    SERIALIZED_FIELD = 'serialized-field'
    SERIALIZED_FORM = 'serialized-form'
    SUPERCLASS = 'superclass'
    SUPERINTERFACE = 'superinterface'
    TYPE_PARAMETER = 'type-parameter'


_RELATIVE_KIND_ORDER = list(RelativeKind)

DIRECTIVE_KINDS = frozenset([
    RelativeKind.MODULE_EXPORTS, RelativeKind.MODULE_OPENS,
    RelativeKind.MODULE_PROVIDES, RelativeKind.MODULE_REQUIRES,
    RelativeKind.MODULE_USES,
])

SERIAL_KINDS = frozenset([
    RelativeKind.SERIAL_VERSION_UID, RelativeKind.SERIALIZATION_METHOD,
    RelativeKind.SERIALIZATION_OVERVIEW, RelativeKind.SERIALIZED_FIELD,
    RelativeKind.SERIALIZED_FORM,
])


def index_sort_key(index):
    """Order relative-position indexes of mixed types deterministically."""
    if index is None:
        return (0,)
    if isinstance(index, bool) or not isinstance(index, (int, str, ElementKey, TypeKey)):
        raise TypeError('unsupported position index: %r' % (index,))
    if isinstance(index, int):
        return (1, index)
    if isinstance(index, str):
        return (2, index)
    return (3, index.sort_key())


class Position(object):
    """Base class for positions; see `ElementPosition` and `RelativePosition`."""

    @staticmethod
    def of(key):
        return ElementPosition(key)

    def is_element(self):
        return False

    def is_relative(self):
        return False

    def is_kind(self, kind):
        return False

    def element_key(self):
        raise NotImplementedError

    def relative_chain(self):
        return ()

    def sort_key(self):
        return (self.element_key().sort_key(),
                tuple((_RELATIVE_KIND_ORDER.index(k), index_sort_key(i))
                      for k, i in self.relative_chain()))

    def __lt__(self, other):
        if not isinstance(other, Position):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def _relative(self, kind, index=None):
        return RelativePosition(self, kind, index)

    def _check(self, cond):
        if not cond:
            raise ValueError('%s not applicable to %r' % (self._caller, self))

    # Facets that apply to any position
    def annotation(self, annotation_type):
        return self._relative(RelativeKind.ANNOTATION, annotation_type)

    # Facets of element positions; checked in ElementPosition._allowed
    def _facet(self, name, kind, index=None):
        self._caller = name
        self._check(self._allowed(kind))
        return self._relative(kind, index)

    def _allowed(self, kind):
        return False

    def annotation_value(self, member):
        self._caller = 'annotation_value'
        self._check(self.is_kind(RelativeKind.ANNOTATION))
        return self._relative(RelativeKind.ANNOTATION_VALUE, member)

    def bound(self, index):
        return self._facet('bound', RelativeKind.BOUND, index)

    def default_value(self):
        return self._facet('default_value', RelativeKind.DEFAULT_VALUE)

    def directive(self, kind, key):
        if kind not in DIRECTIVE_KINDS:
            raise ValueError('not a directive kind: %s' % kind)
        return self._facet('directive', kind, key)

    def doc_file(self, name):
        return self._facet('doc_file', RelativeKind.DOC_FILE, name)

    def exception(self, type_key):
        return self._facet('exception', RelativeKind.EXCEPTION, type_key)

    def parameter(self, index):
        return self._facet('parameter', RelativeKind.PARAMETER, index)

    def permitted_subclass(self, key):
        return self._facet('permitted_subclass', RelativeKind.PERMITTED_SUBCLASS, key)

    def record_component(self, index):
        return self._facet('record_component', RelativeKind.RECORD_COMPONENT, index)

    def return_type(self):
        return self._facet('return_type', RelativeKind.RETURN_TYPE)

    def serial_version_uid(self):
        return self._facet('serial_version_uid', RelativeKind.SERIAL_VERSION_UID)

    def serialization_method(self, name):
        return self._facet('serialization_method', RelativeKind.SERIALIZATION_METHOD, name)

    def serialization_overview(self):
        return self._facet('serialization_overview', RelativeKind.SERIALIZATION_OVERVIEW)

    def serialized_field(self, name):
        return self._facet('serialized_field', RelativeKind.SERIALIZED_FIELD, name)

    def serialized_form(self):
        return self._facet('serialized_form', RelativeKind.SERIALIZED_FORM)

    def superclass(self):
        return self._facet('superclass', RelativeKind.SUPERCLASS)

    def superinterface(self, key):
        return self._facet('superinterface', RelativeKind.SUPERINTERFACE, key)

    def type_parameter(self, index):
        return self._facet('type_parameter', RelativeKind.TYPE_PARAMETER, index)


_ELEMENT_FACETS = {
    ElementKind.MODULE: frozenset([RelativeKind.DOC_FILE]) | DIRECTIVE_KINDS,
    ElementKind.PACKAGE: frozenset([RelativeKind.DOC_FILE]),
    ElementKind.TYPE: frozenset([
        RelativeKind.PERMITTED_SUBCLASS, RelativeKind.RECORD_COMPONENT,
        RelativeKind.SUPERCLASS, RelativeKind.SUPERINTERFACE,
        RelativeKind.TYPE_PARAMETER,
    ]) | SERIAL_KINDS,
    ElementKind.EXECUTABLE: frozenset([
        RelativeKind.DEFAULT_VALUE, RelativeKind.EXCEPTION,
        RelativeKind.PARAMETER, RelativeKind.RETURN_TYPE,
        RelativeKind.TYPE_PARAMETER,
    ]),
    ElementKind.VARIABLE: frozenset(),
    ElementKind.TYPE_PARAMETER: frozenset([RelativeKind.BOUND]),
}


class ElementPosition(Position):
    """The position of a declaration itself."""

    __slots__ = ('key', '_caller')

    def __init__(self, key):
        if not isinstance(key, ElementKey):
            raise TypeError('expected ElementKey, got %r' % (key,))
        self.key = key

    def is_element(self):
        return True

    def element_key(self):
        return self.key

    def _allowed(self, kind):
        return kind in _ELEMENT_FACETS[self.key.kind]

    def __eq__(self, other):
        return isinstance(other, ElementPosition) and self.key == other.key

    def __hash__(self):
        return hash(self.key)

    def __repr__(self):
        return '{%r}' % (self.key,)


class RelativePosition(Position):
    """A facet located relative to a parent position."""

    __slots__ = ('parent', 'kind', 'index', '_caller', '_hash')

    def __init__(self, parent, kind, index=None):
        index_sort_key(index)
        self.parent = parent
        self.kind = kind
        self.index = index
        self._hash = None

    def is_relative(self):
        return True

    def is_kind(self, kind):
        return self.kind is kind

    def element_key(self):
        pos = self.parent
        while pos.is_relative():
            pos = pos.parent
        return pos.element_key()

    def relative_chain(self):
        return self.parent.relative_chain() + ((self.kind, self.index),)

    def _allowed(self, kind):
        # Relative facets of facets: parameters carry annotations, and
        # type parameters carry bounds.
        if self.kind is RelativeKind.TYPE_PARAMETER:
            return kind is RelativeKind.BOUND
        return False

    def __eq__(self, other):
        return (isinstance(other, RelativePosition)
                and self.kind is other.kind
                and self.index == other.index
                and self.parent == other.parent)

    def __hash__(self):
        if self._hash is None:
            self._hash = hash((self.parent, self.kind, self.index))
        return self._hash

    def __repr__(self):
        if self.index is None:
            return '%r.%s' % (self.parent, self.kind.value)
        return '%r.%s[%s]' % (self.parent, self.kind.value, self.index)


class APIMap(dict):
    """
    Values for one position, keyed by API instance.

    Absence of an instance means the position does not exist in that
    instance.  Iteration follows the order in which entries were added;
    use `APIMap.of` to order entries by instance order.
    """

    @classmethod
    def of(cls, apis, values=None):
        values = values or {}
        rv = cls()
        for api in apis:
            value = values.get(api)
            if value is not None:
                rv[api] = value
        return rv

    def __setitem__(self, api, value):
        if api is None or value is None:
            raise ValueError('APIMap entries may not be None')
        super().__setitem__(api, value)

    def map(self, f):
        rv = APIMap()
        for api, value in self.items():
            r = f(api, value)
            if r is not None:
                rv[api] = r
        return rv


@dataclass(frozen=True)
class Element:
    """A declaration as seen in one API instance."""
    kind: str
    name: str
    signature: str = ''
    modifiers: Tuple[str, ...] = ()
    doc_comment: Optional[str] = None
    api_description: Optional[str] = None

    def __str__(self):
        return self.signature or self.name


@dataclass(frozen=True)
class Annotation:
    """An annotation use: type name plus element values, in source order."""
    type_name: str
    values: Tuple[Tuple[str, str], ...] = ()

    def __str__(self):
        if not self.values:
            return '@%s' % self.type_name
        if len(self.values) == 1 and self.values[0][0] == 'value':
            return '@%s(%s)' % (self.type_name, self.values[0][1])
        return '@%s(%s)' % (self.type_name, ', '.join('%s=%s' % nv for nv in self.values))


@dataclass(frozen=True)
class DocFile:
    """A documentation file shipped with a module or package."""
    name: str
    content: Optional[str] = None

    def __str__(self):
        return self.name


def describe(value):
    """Return the text used to show a reported value in a page."""
    if isinstance(value, Element):
        return value.signature or value.name
    if isinstance(value, (tuple, list, frozenset, set)):
        items = sorted(value, key=str) if isinstance(value, (set, frozenset)) else value
        return ', '.join(describe(v) for v in items)
    return str(value)
