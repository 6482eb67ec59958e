import doctest

import pytest

import apidiff
from apidiff.errors import Abort
from apidiff.links import (Links, anchor_for, display_name, note_name,
                           page_key_for, path_for)
from apidiff.model import (ElementKey, ElementKind, array_type, declared_type,
                           executable_key, module_key, package_key,
                           primitive_type, type_key, type_parameter_key,
                           type_variable, variable_key)

MOD = module_key('java.base')
PKG = package_key('java.util', MOD)
MAP = type_key('Map', PKG)
ENTRY = type_key('Entry', MAP)
STRING = type_key('String', package_key('java.lang', MOD))


def test_paths():
    assert path_for(MOD) == 'java.base/module-summary.html'
    assert path_for(PKG) == 'java.base/java/util/package-summary.html'
    assert path_for(package_key('com.example')) == 'com/example/package-summary.html'
    assert path_for(MAP) == 'java.base/java/util/Map.html'
    assert path_for(ENTRY) == 'java.base/java/util/Map.Entry.html'
    assert path_for(variable_key('size', ENTRY)) == path_for(ENTRY)
    assert path_for(type_parameter_key('K', MAP)) is None


def test_unnamed_package():
    unnamed = package_key('')
    assert path_for(unnamed) == 'package-summary.html'
    assert path_for(type_key('Main', unnamed)) == 'Main.html'


def test_anchors():
    m = executable_key('put', MAP, [type_variable('K'), array_type(primitive_type('int')),
                                    declared_type(STRING)])
    assert anchor_for(m) == 'put(K,int[],String)'
    assert anchor_for(executable_key('clear', MAP)) == 'clear()'
    assert anchor_for(variable_key('size', MAP)) == 'size'
    assert anchor_for(MAP) is None


def test_overload_anchors_differ():
    a = executable_key('get', MAP, [primitive_type('int')])
    b = executable_key('get', MAP, [declared_type(STRING)])
    assert anchor_for(a) != anchor_for(b)


def test_page_key_for():
    m = executable_key('getKey', ENTRY)
    assert page_key_for(m) == ENTRY
    assert page_key_for(type_parameter_key('T', m)) == ENTRY
    assert page_key_for(PKG) == PKG


def test_page_key_for_broken_chain():
    orphan = ElementKey(ElementKind.EXECUTABLE, 'run')
    with pytest.raises(Abort):
        page_key_for(orphan)


def test_display_names():
    assert display_name(ENTRY) == 'Map.Entry'
    assert display_name(executable_key('get', MAP, [declared_type(STRING)])) == 'get(String)'


def test_note_names():
    assert note_name(PKG) == 'java.base/java.util'
    assert note_name(ENTRY) == 'java.base/java.util.Map.Entry'
    m = executable_key('get', MAP, [declared_type(STRING)])
    assert note_name(m) == 'java.base/java.util.Map#get(String)'
    assert note_name(variable_key('size', MAP)) == 'java.base/java.util.Map#size'


def test_relative_links():
    links = Links(path_for(ENTRY))
    assert links.path('index.html') == '../../../index.html'
    assert links.href(MAP) == 'Map.html'
    assert links.href(variable_key('size', MAP)) == 'Map.html#size'
    assert links.href(MOD) == '../../module-summary.html'
    assert Links('index.html').path('apidiff.css') == 'apidiff.css'


def test_link_element():
    link = Links('index.html').link(MAP)
    assert str(link) == '<a href="java.base/java/util/Map.html">Map</a>'


def test_doctests_apidiff_module():
    res = doctest.testmod(apidiff, verbose=False)
    assert res.failed == 0
