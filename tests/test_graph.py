"""
Unit tests for the module graph and binding collection.
"""
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from scanner import nodes
from scanner.errors import ModuleNotFoundError, UnresolvedExportError
from scanner.graph import (
    ImportedDefaultBinding,
    ImportedNamedBinding,
    LocalBinding,
    ModuleGraph,
    NamespaceBinding,
    ReExportedBinding,
)
from scanner.source import MemorySourceProvider


def make_graph(files):
    provider = MemorySourceProvider(files)
    return ModuleGraph(provider), provider


class TestLoading:
    """Tests for reading and caching modules."""

    def test_module_is_read_once(self):
        """Repeated loads hit the cache."""
        graph, provider = make_graph({'/p/a.js': 'export default 1;'})
        first = graph.load('/p/a.js')
        second = graph.load('/p/a.js')
        assert first is second
        assert provider.read_count == 1

    def test_directory_and_file_share_cache_entry(self):
        """A directory and its index file are the same module."""
        graph, provider = make_graph({'/p/button/index.js': 'export default 1;'})
        assert graph.load('/p/button') is graph.load('/p/button/index.js')
        assert provider.read_count == 1

    def test_missing_module(self):
        """Unknown paths raise ModuleNotFoundError."""
        graph, _ = make_graph({})
        with pytest.raises(ModuleNotFoundError):
            graph.load('/p/missing.js')

    def test_added_source_needs_no_read(self):
        """Virtual modules are served from the cache."""
        graph, provider = make_graph({})
        graph.add_source('/p/entry.js', 'export const a = 1;')
        assert 'a' in graph.load('/p/entry.js').exports
        assert provider.read_count == 0


class TestResolveSpecifier:
    """Tests for turning import specifiers into paths."""

    @pytest.fixture
    def graph(self):
        graph, _ = make_graph({
            '/p/a.js': '',
            '/p/Button.jsx': '',
            '/p/dir/index.js': '',
            '/p/style.css': '',
            '/p/data.json': '',
        })
        return graph

    def test_exact_file(self, graph):
        assert graph.resolve_specifier('/p/x.js', './a.js') == '/p/a.js'

    def test_extension_probing(self, graph):
        """Missing extensions are tried in configured order."""
        assert graph.resolve_specifier('/p/x.js', './a') == '/p/a.js'
        assert graph.resolve_specifier('/p/x.js', './Button') == '/p/Button.jsx'

    def test_directory_index(self, graph):
        assert graph.resolve_specifier('/p/x.js', './dir') == '/p/dir/index.js'
        assert graph.resolve_specifier('/p/dir/index.js', '../a') == '/p/a.js'

    def test_external(self, graph):
        """Bare package names are never resolved."""
        assert graph.resolve_specifier('/p/x.js', 'react') is None
        assert graph.resolve_specifier('/p/x.js', 'prop-types') is None

    def test_assets_are_external(self, graph):
        """Non-script files are not modules."""
        assert graph.resolve_specifier('/p/x.js', './style.css') is None
        assert graph.resolve_specifier('/p/x.js', './data.json') is None

    def test_missing_file_keeps_path(self, graph):
        """Unresolvable relative paths are left for load() to report."""
        assert graph.resolve_specifier('/p/x.js', './nope') == '/p/nope'


class TestExports:
    """Tests for ES module export collection."""

    def test_declarations(self):
        graph, _ = make_graph({'/p/a.js': '''
            export const a = 1, b = 2;
            export function helper() {}
            export default class Button {}
        '''})
        module = graph.load('/p/a.js')
        assert set(module.exports) == {'a', 'b', 'helper', 'default'}
        assert isinstance(module.exports['default'].node, nodes.ClassDeclaration)
        assert module.scope['Button'].node == module.exports['default'].node

    def test_local_aliases(self):
        """`export {a as b}` records an alias to the local name."""
        graph, _ = make_graph({'/p/a.js': 'const a = 1;\nexport {a as b};'})
        binding = graph.load('/p/a.js').exports['b']
        assert isinstance(binding, LocalBinding)
        assert isinstance(binding.node, nodes.Identifier)
        assert binding.node.name == 'a'

    def test_re_exports(self):
        graph, _ = make_graph({'/p/a.js': '''
            export {default as Button, size} from './Button';
            export * as icons from './icons';
        '''})
        module = graph.load('/p/a.js')
        button = module.exports['Button']
        assert isinstance(button, ReExportedBinding)
        assert (button.source, button.imported) == ('./Button', 'default')
        assert isinstance(module.exports['icons'], NamespaceBinding)

    def test_star_fallback(self):
        """Names missing locally are looked up through `export *`."""
        graph, _ = make_graph({
            '/p/a.js': "export * from './b';\nexport * from './c';",
            '/p/b.js': 'export const x = 1;',
            '/p/c.js': 'export const y = 2;\nexport default 3;',
        })
        assert graph.get_export('/p/a.js', 'y').module_path == '/p/c.js'

    def test_default_is_not_star_exported(self):
        """`export *` never forwards the default export."""
        graph, _ = make_graph({
            '/p/a.js': "export * from './c';",
            '/p/c.js': 'export default 3;',
        })
        with pytest.raises(UnresolvedExportError) as excinfo:
            graph.get_export('/p/a.js')
        assert excinfo.value.name == 'default'

    def test_star_cycle_terminates(self):
        """Mutual `export *` does not loop."""
        graph, _ = make_graph({
            '/p/a.js': "export * from './b';",
            '/p/b.js': "export * from './a';",
        })
        with pytest.raises(UnresolvedExportError):
            graph.get_export('/p/a.js', 'missing')


class TestCommonJS:
    """Tests for require() and module.exports."""

    def test_module_exports_require(self):
        graph, _ = make_graph({'/p/a.js': "module.exports = require('./b');"})
        binding = graph.load('/p/a.js').exports['default']
        assert isinstance(binding, ImportedDefaultBinding)
        assert binding.require is True
        assert binding.source == './b'

    def test_named_exports(self):
        graph, _ = make_graph({'/p/a.js': '''
            exports.one = function () {};
            module.exports.two = 2;
        '''})
        exports = graph.load('/p/a.js').exports
        assert isinstance(exports['one'].node, nodes.FunctionExpression)
        assert exports['two'].node.value == 2

    def test_require_bindings(self):
        """require() in declarations binds imports."""
        graph, _ = make_graph({'/p/a.js': '''
            const b = require('./b');
            const c = require('./c').thing;
            const {d, e: f} = require('./d');
        '''})
        scope = graph.load('/p/a.js').scope
        assert isinstance(scope['b'], ImportedDefaultBinding)
        assert isinstance(scope['c'], ImportedNamedBinding)
        assert scope['c'].imported == 'thing'
        assert (scope['d'].source, scope['d'].imported) == ('./d', 'd')
        assert scope['f'].imported == 'e'


class TestScope:
    """Tests for local declarations."""

    def test_statics(self):
        """Assignments to `X.member` are recorded as statics of X."""
        graph, _ = make_graph({'/p/a.js': '''
            function Button() {}
            Button.propTypes = {label: 1};
            Button.displayName = 'Btn';
        '''})
        statics = graph.load('/p/a.js').statics['Button']
        assert isinstance(statics['propTypes'], nodes.ObjectExpression)
        assert statics['displayName'].value == 'Btn'

    def test_destructuring(self):
        """Destructured names point at synthesized member expressions."""
        graph, _ = make_graph({'/p/a.js': '''
            const {a, b: {c}} = config;
            const [first, ...rest] = list;
            let empty;
        '''})
        scope = graph.load('/p/a.js').scope
        assert nodes.member_name(scope['a'].node) == 'a'
        assert nodes.member_name(scope['c'].node) == 'c'
        assert nodes.member_name(scope['c'].node.object) == 'b'
        assert scope['first'].node.computed is True
        assert scope['rest'].node is None
        assert scope['empty'].node is None

    def test_imports(self):
        graph, _ = make_graph({'/p/a.js': '''
            import React, {Component as C} from 'react';
            import * as utils from './utils';
        '''})
        scope = graph.load('/p/a.js').scope
        assert isinstance(scope['React'], ImportedDefaultBinding)
        assert scope['C'].imported == 'Component'
        assert isinstance(scope['utils'], NamespaceBinding)
