"""
Unit tests for the syntax tree builder.
"""
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from scanner import nodes
from scanner.errors import ParseError
from scanner.syntax import parse_source


def first(code):
    """Parse code and return its first statement."""
    return parse_source(code).body[0]


class TestDeclarations:
    """Tests for declaration nodes."""

    def test_function_statement_becomes_declaration(self):
        """A named function in statement position is a declaration."""
        node = first("function foo(a, b) { return a; }")
        assert isinstance(node, nodes.FunctionDeclaration)
        assert node.id == 'foo'
        assert [p.name for p in node.params] == ['a', 'b']

    def test_named_default_class_is_declaration(self):
        """`export default class X` declares X."""
        node = first('''
        export default class Button extends React.Component {
          static propTypes = {};
          render() { return null; }
        }''')
        assert isinstance(node, nodes.ExportDefaultDeclaration)
        declaration = node.declaration
        assert isinstance(declaration, nodes.ClassDeclaration)
        assert declaration.id == 'Button'
        assert isinstance(declaration.superclass, nodes.MemberExpression)

        field, method = declaration.body
        assert isinstance(field, nodes.ClassProperty)
        assert field.static is True
        assert nodes.key_name(field.key) == 'propTypes'
        assert isinstance(method, nodes.ClassMethod)
        assert method.static is False
        assert nodes.key_name(method.key) == 'render'

    def test_anonymous_default_class_stays_expression(self):
        """An anonymous default class has no declared name."""
        node = first("export default class extends React.Component {}")
        assert isinstance(node.declaration, nodes.ClassExpression)
        assert node.declaration.id is None

    def test_variable_declaration(self):
        """const declarations keep kind, patterns and initializers."""
        node = first("const a = 1, {b, c: d} = obj;")
        assert isinstance(node, nodes.VariableDeclaration)
        assert node.kind == 'const'
        first_declarator, second_declarator = node.declarations
        assert first_declarator.id.name == 'a'
        assert first_declarator.init.value == 1
        assert isinstance(second_declarator.id, nodes.ObjectPattern)
        keys = [prop.key for prop in second_declarator.id.properties]
        assert keys == ['b', 'c']


class TestArrowFunctions:
    """Tests for arrow function bodies."""

    def test_braces_body_is_block(self):
        """`() => {}` has an empty block body, never an object."""
        arrow = first("const f = arg => {};").declarations[0].init
        assert isinstance(arrow, nodes.ArrowFunctionExpression)
        assert isinstance(arrow.body, nodes.BlockStatement)
        assert arrow.expression is False
        assert [p.name for p in arrow.params] == ['arg']

    def test_parenthesized_object_body(self):
        """`() => ({...})` returns an object."""
        arrow = first("const f = () => ({a: 1});").declarations[0].init
        assert arrow.expression is True
        assert isinstance(nodes.unwrap_parens(arrow.body), nodes.ObjectExpression)

    def test_block_body_with_return(self):
        """Return statements are found inside block bodies."""
        arrow = first("const f = () => { if (x) { return 1; } };").declarations[0].init
        returns = list(nodes.iter_returns(arrow.body))
        assert len(returns) == 1
        assert returns[0].argument.value == 1


class TestModules:
    """Tests for import/export nodes."""

    def test_import_specifiers(self):
        """Default, renamed and namespace specifiers."""
        node = first("import React, {Component as C} from 'react';")
        assert node.source == 'react'
        default, named = node.specifiers
        assert (default.kind, default.local) == ('default', 'React')
        assert (named.kind, named.imported, named.local) == ('named', 'Component', 'C')

        node = first("import * as ns from './ns';")
        assert node.specifiers[0].kind == 'namespace'
        assert node.specifiers[0].local == 'ns'

    def test_re_export_specifiers(self):
        """`export {a as b} from` keeps local and exported names."""
        node = first("export {internalDriver as driverFactory, default} from './driver.js';")
        assert node.source == './driver.js'
        assert [(s.local, s.exported) for s in node.specifiers] == [
            ('internalDriver', 'driverFactory'),
            ('default', 'default'),
        ]

    def test_export_all(self):
        """`export *` with and without a namespace name."""
        assert first("export * from './a';").exported is None
        assert first("export * as ns from './a';").exported == 'ns'


class TestStatementBoundaries:
    """Tests for where one statement ends and the next begins."""

    def test_call_after_semicolon_statement(self):
        """A call in a later statement stays a call."""
        program = parse_source("const a = 1;\nconst x = f(1);")
        assert len(program.body) == 2
        init = program.body[1].declarations[0].init
        assert isinstance(init, nodes.CallExpression)
        assert init.callee.name == 'f'
        assert [arg.value for arg in init.arguments] == [1]

    def test_newline_separated_statements(self):
        """Line breaks end statements when there is no semicolon."""
        program = parse_source("const a = 1\nconst b = f(a)\nexport default b")
        assert [node.type for node in program.body] == [
            'VariableDeclaration', 'VariableDeclaration', 'ExportDefaultDeclaration',
        ]
        assert isinstance(program.body[1].declarations[0].init, nodes.CallExpression)

    def test_continued_line(self):
        """A line starting with `.` continues the previous expression."""
        program = parse_source("const p = promise\n  .then(done)\n  .catch(fail)")
        assert len(program.body) == 1
        init = program.body[0].declarations[0].init
        assert isinstance(init, nodes.CallExpression)
        assert nodes.member_name(init.callee) == 'catch'

    def test_last_statement_before_brace(self):
        """The final statement of a block needs no terminator."""
        node = first("function f() { if (x) return 1 }")
        returns = list(nodes.iter_returns(node.body))
        assert [r.argument.value for r in returns] == [1]

    def test_return_at_end_of_line(self):
        """`return` followed by a line break returns nothing."""
        node = first("function f() {\n  return\n  g()\n}")
        statement, call = node.body.body
        assert isinstance(statement, nodes.ReturnStatement)
        assert statement.argument is None
        assert isinstance(call, nodes.ExpressionStatement)

    def test_statements_on_one_line_need_semicolon(self):
        """Two statements on one line without `;` are rejected."""
        with pytest.raises(ParseError):
            parse_source("const a = 1 const b = 2")


class TestLiterals:
    """Tests for literal values and positions."""

    def test_string_escapes(self):
        """String values are unescaped, raw text is kept."""
        literal = first(r"const s = 'it\'s\n';").declarations[0].init
        assert literal.value == "it's\n"
        assert literal.raw == r"'it\'s\n'"

    def test_numbers(self):
        """Numeric literals are converted."""
        declarations = first("const a = 42, b = 1.5, c = 0x10;").declarations
        assert [d.init.value for d in declarations] == [42, 1.5, 16]

    def test_template_without_expressions(self):
        """A template without substitutions has a value."""
        declarations = first("const a = `plain`, b = `x${y}`;").declarations
        assert declarations[0].init.value == 'plain'
        assert declarations[1].init.value is None

    def test_positions(self):
        """Nodes carry source offsets and lines."""
        source = "const a = 1;\nconst b = 'two';"
        program = parse_source(source)
        second = program.body[1]
        assert second.line == 2
        init = second.declarations[0].init
        assert source[init.start:init.end] == "'two'"


class TestParseErrors:
    """Tests for parse failure diagnostics."""

    def test_error_has_location(self):
        """Parse errors report path, line and the offending line."""
        with pytest.raises(ParseError) as excinfo:
            parse_source("const a = 1;\nconst = ;", path='broken.js')
        error = excinfo.value
        assert error.path == 'broken.js'
        assert error.line_number == 2
        assert error.context == 'const = ;'
        assert 'Parse error in broken.js at line 2' in str(error)

    def test_unbalanced_braces_hint(self):
        """Unmatched braces get a specific suggestion."""
        with pytest.raises(ParseError) as excinfo:
            parse_source("function f() {")
        assert 'Unmatched braces' in excinfo.value.suggestion
