"""
JavaScript syntax tree builder.

Parses module source with the Lark grammar and transforms the parse tree into
the typed nodes of ``scanner.nodes``. Also performs the two rewrites the
grammar leaves ambiguous:

* a named function/class in statement position is a declaration;
* an unparenthesized object literal used as an arrow body is a block.
"""

import re
from functools import lru_cache

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedInput, VisitError

from scanner import nodes
from scanner.errors import ParseError, detect_common_error_patterns, get_line_context
from scanner.grammar import js_grammar

_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', 'b': '\b', 'f': '\f', 'v': '\v', '0': '\0'}
_ESCAPE = re.compile(r'\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\n|.)')


def _unescape(body):
    def replace(match):
        escape = match.group(1)
        if escape in _ESCAPES:
            return _ESCAPES[escape]
        if escape == '\n':
            return ''
        if escape.startswith('u{'):
            return chr(int(escape[2:-1], 16))
        if escape[0] in 'ux' and len(escape) > 1:
            return chr(int(escape[1:], 16))
        return escape
    return _ESCAPE.sub(replace, body)


def _number(raw):
    text = raw.replace('_', '').rstrip('n')
    lowered = text.lower()
    if lowered.startswith('0x'):
        return int(text, 16)
    if lowered.startswith('0b'):
        return int(text, 2)
    if lowered.startswith('0o'):
        return int(text, 8)
    value = float(text)
    return int(value) if value.is_integer() and 'e' not in lowered and '.' not in text else value


def _position(meta):
    """Positions of a rule match; empty matches carry none."""
    return {
        'start': getattr(meta, 'start_pos', None),
        'end': getattr(meta, 'end_pos', None),
        'line': getattr(meta, 'line', None),
    }


def _token_position(token):
    return {'start': token.start_pos, 'end': token.end_pos, 'line': token.line}


def _tokens(children, kind=None):
    return [c for c in children if isinstance(c, Token) and (kind is None or c.type == kind)]


def _nodes(children):
    return [c for c in children if isinstance(c, nodes.Node)]


def _key(child):
    """(key node, computed) for an object or class member key."""
    if isinstance(child, nodes.Node):
        return child, True
    if child.type in ('IDENT_NAME', 'CLASS_KEY'):
        return nodes.Identifier(name=str(child), **_token_position(child)), False
    if child.type == 'STRING':
        return nodes.Literal(value=_unescape(child[1:-1]), raw=str(child),
                             **_token_position(child)), False
    return nodes.Literal(value=_number(str(child)), raw=str(child), **_token_position(child)), False


def _as_declaration(node):
    """Named function/class expressions in declaration position become declarations."""
    if isinstance(node, nodes.FunctionExpression) and node.id:
        return nodes.FunctionDeclaration(id=node.id, params=node.params, body=node.body,
                                         start=node.start, end=node.end, line=node.line)
    if isinstance(node, nodes.ClassExpression) and node.id:
        return nodes.ClassDeclaration(id=node.id, superclass=node.superclass, body=node.body,
                                      decorators=node.decorators,
                                      start=node.start, end=node.end, line=node.line)
    return node


@v_args(meta=True)
class JsTreeBuilder(Transformer):
    """
    Transforms Lark parse trees into ``scanner.nodes`` objects.

    Each rule callback receives the rule's meta (for positions) and its
    already-transformed children. Terminals arrive as Lark tokens.
    """

    def start(self, meta, children):
        return nodes.Program(body=_nodes(children), **_position(meta))

    # --- Imports ---

    def import_decl(self, meta, children):
        source = _tokens(children, 'STRING')[0]
        specifiers = []
        for child in children:
            if isinstance(child, list):
                specifiers = child
        return nodes.ImportDeclaration(source=_unescape(source[1:-1]), specifiers=specifiers,
                                       **_position(meta))

    def import_clause(self, meta, children):
        specifiers = []
        for child in children:
            if isinstance(child, list):
                specifiers.extend(child)
            else:
                specifiers.append(child)
        return specifiers

    def default_import(self, meta, children):
        return nodes.ImportSpecifier(kind='default', imported='default', local=str(children[0]),
                                     **_position(meta))

    def namespace_import(self, meta, children):
        return nodes.ImportSpecifier(kind='namespace', local=str(children[0]), **_position(meta))

    def named_imports(self, meta, children):
        return list(children)

    def import_spec(self, meta, children):
        imported = str(children[0])
        local = str(children[1]) if len(children) > 1 else imported
        kind = 'default' if imported == 'default' else 'named'
        return nodes.ImportSpecifier(kind=kind, imported=imported, local=local, **_position(meta))

    # --- Exports ---

    def export_default(self, meta, children):
        return nodes.ExportDefaultDeclaration(declaration=_as_declaration(children[0]),
                                              **_position(meta))

    def export_declaration(self, meta, children):
        return nodes.ExportNamedDeclaration(declaration=_as_declaration(children[0]),
                                            **_position(meta))

    export_var = export_declaration

    def export_named(self, meta, children):
        sources = _tokens(children, 'STRING')
        source = _unescape(sources[0][1:-1]) if sources else None
        return nodes.ExportNamedDeclaration(specifiers=_nodes(children), source=source,
                                            **_position(meta))

    def export_all(self, meta, children):
        source = _tokens(children, 'STRING')[0]
        names = _tokens(children, 'IDENT_NAME')
        return nodes.ExportAllDeclaration(source=_unescape(source[1:-1]),
                                          exported=str(names[0]) if names else None,
                                          **_position(meta))

    def export_spec(self, meta, children):
        local = str(children[0])
        exported = str(children[1]) if len(children) > 1 else local
        return nodes.ExportSpecifier(local=local, exported=exported, **_position(meta))

    # --- Statements ---

    def var_decl(self, meta, children):
        kind = _tokens(children, 'VAR_KIND')[0]
        return nodes.VariableDeclaration(kind=str(kind), declarations=_nodes(children),
                                         **_position(meta))

    def declarator(self, meta, children):
        init = children[1] if len(children) > 1 else None
        return nodes.VariableDeclarator(id=children[0], init=init, **_position(meta))

    def return_stmt(self, meta, children):
        return nodes.ReturnStatement(argument=children[0] if children else None, **_position(meta))

    def if_stmt(self, meta, children):
        alternate = children[2] if len(children) > 2 else None
        return nodes.IfStatement(test=children[0], consequent=children[1], alternate=alternate,
                                 **_position(meta))

    if_last = if_stmt

    def for_head(self, meta, children):
        return None

    def for_stmt(self, meta, children):
        return nodes.LoopStatement(body=children[-1], **_position(meta))

    for_last = for_stmt

    def while_stmt(self, meta, children):
        return nodes.LoopStatement(body=children[-1], **_position(meta))

    while_last = while_stmt

    def do_stmt(self, meta, children):
        return nodes.LoopStatement(body=children[0], **_position(meta))

    def switch_stmt(self, meta, children):
        return nodes.SwitchStatement(discriminant=children[0], cases=children[1:], **_position(meta))

    def switch_case(self, meta, children):
        return nodes.SwitchCase(test=children[0], consequent=children[1:], **_position(meta))

    def switch_default(self, meta, children):
        return nodes.SwitchCase(consequent=list(children), **_position(meta))

    def throw_stmt(self, meta, children):
        return nodes.ThrowStatement(argument=children[0], **_position(meta))

    def try_stmt(self, meta, children):
        handler = next((c for c in children[1:] if isinstance(c, nodes.CatchClause)), None)
        blocks = [c for c in children[1:] if isinstance(c, nodes.BlockStatement)]
        return nodes.TryStatement(block=children[0], handler=handler,
                                  finalizer=blocks[0] if blocks else None, **_position(meta))

    def catch_clause(self, meta, children):
        param = children[0] if len(children) > 1 else None
        return nodes.CatchClause(param=param, body=children[-1], **_position(meta))

    def break_stmt(self, meta, children):
        return nodes.JumpStatement(keyword='break', label=str(children[0]) if children else None,
                                   **_position(meta))

    def continue_stmt(self, meta, children):
        return nodes.JumpStatement(keyword='continue', label=str(children[0]) if children else None,
                                   **_position(meta))

    def block(self, meta, children):
        return nodes.BlockStatement(body=_nodes(children), **_position(meta))

    def expr_stmt(self, meta, children):
        expression = children[0]
        declaration = _as_declaration(expression)
        if declaration is not expression:
            return declaration
        return nodes.ExpressionStatement(expression=expression, **_position(meta))

    def empty_stmt(self, meta, children):
        return nodes.EmptyStatement(**_position(meta))

    # --- Expressions ---

    def assignment(self, meta, children):
        left, operator, right = children
        return nodes.AssignmentExpression(operator=str(operator), left=left, right=right,
                                          **_position(meta))

    def arrow_function(self, meta, children):
        params, body = children[0], children[1]
        if isinstance(body, nodes.ObjectExpression):
            # `() => {}` is an empty block in JS, never an object
            body = nodes.BlockStatement(start=body.start, end=body.end, line=body.line)
        expression = not isinstance(body, nodes.BlockStatement)
        return nodes.ArrowFunctionExpression(params=params, body=body, expression=expression,
                                             **_position(meta))

    def arrow_params(self, meta, children):
        if not children:
            return []
        child = children[0]
        if isinstance(child, Token):
            return [nodes.Identifier(name=str(child), **_token_position(child))]
        return child

    def conditional_expr(self, meta, children):
        test, consequent, alternate = children
        return nodes.ConditionalExpression(test=test, consequent=consequent, alternate=alternate,
                                           **_position(meta))

    def binary(self, meta, children):
        return nodes.BinaryExpression(operators=[str(t) for t in _tokens(children)],
                                      operands=_nodes(children), **_position(meta))

    def unary_expr(self, meta, children):
        return nodes.UnaryExpression(operator=str(children[0]), argument=children[1],
                                     **_position(meta))

    def await_expr(self, meta, children):
        return nodes.UnaryExpression(operator='await', argument=children[0], **_position(meta))

    def yield_expr(self, meta, children):
        argument = children[0] if children else None
        return nodes.UnaryExpression(operator='yield', argument=argument, **_position(meta))

    def update_expr(self, meta, children):
        return nodes.UnaryExpression(operator=str(children[1]), argument=children[0], prefix=False,
                                     **_position(meta))

    def member(self, meta, children):
        target, name = children
        prop = nodes.Identifier(name=str(name), **_token_position(name))
        return nodes.MemberExpression(object=target, property=prop, **_position(meta))

    def computed_member(self, meta, children):
        return nodes.MemberExpression(object=children[0], property=children[1], computed=True,
                                      **_position(meta))

    def call(self, meta, children):
        return nodes.CallExpression(callee=children[0], arguments=children[1], **_position(meta))

    def new_expr(self, meta, children):
        arguments = children[1] if len(children) > 1 else []
        return nodes.NewExpression(callee=children[0], arguments=arguments, **_position(meta))

    def tagged_template(self, meta, children):
        return nodes.TaggedTemplateExpression(tag=children[0], quasi=self._template(children[1]),
                                              **_position(meta))

    def arguments(self, meta, children):
        return list(children)

    def spread(self, meta, children):
        return nodes.SpreadElement(argument=children[0], **_position(meta))

    def paren(self, meta, children):
        return nodes.ParenthesizedExpression(expression=children[0], **_position(meta))

    # --- Primaries ---

    def identifier(self, meta, children):
        return nodes.Identifier(name=str(children[0]), **_position(meta))

    def string(self, meta, children):
        raw = str(children[0])
        return nodes.Literal(value=_unescape(raw[1:-1]), raw=raw, **_position(meta))

    def number(self, meta, children):
        raw = str(children[0])
        return nodes.Literal(value=_number(raw), raw=raw, **_position(meta))

    def template(self, meta, children):
        return self._template(children[0])

    def _template(self, token):
        raw = str(token)
        body = raw[1:-1]
        value = None if '${' in body else _unescape(body)
        return nodes.TemplateLiteral(raw=raw, value=value, **_token_position(token))

    def regex(self, meta, children):
        return nodes.Literal(raw=str(children[0]), **_position(meta))

    def boolean(self, meta, children):
        raw = str(children[0])
        return nodes.Literal(value=raw == 'true', raw=raw, **_position(meta))

    def null(self, meta, children):
        return nodes.Literal(value=None, raw='null', **_position(meta))

    def this_expr(self, meta, children):
        return nodes.ThisExpression(**_position(meta))

    def super_expr(self, meta, children):
        return nodes.Super(**_position(meta))

    # --- Objects & arrays ---

    def object(self, meta, children):
        return nodes.ObjectExpression(properties=list(children), **_position(meta))

    def property(self, meta, children):
        (key, computed), value = children
        return nodes.Property(key=key, value=value, computed=computed, **_position(meta))

    def shorthand_property(self, meta, children):
        name = children[0]
        return nodes.Property(key=nodes.Identifier(name=str(name), **_token_position(name)),
                              value=nodes.Identifier(name=str(name), **_token_position(name)),
                              shorthand=True, **_position(meta))

    def method_property(self, meta, children):
        (key, computed), function = self._method(meta, children)
        return nodes.Property(key=key, value=function, computed=computed, method=True,
                              **_position(meta))

    def prop_key(self, meta, children):
        return _key(children[0])

    def class_key(self, meta, children):
        return _key(children[0])

    def array(self, meta, children):
        return nodes.ArrayExpression(elements=list(children), **_position(meta))

    # --- Functions ---

    def function_expr(self, meta, children):
        names = _tokens(children, 'NAME')
        params = next((c for c in children if isinstance(c, list)), [])
        return nodes.FunctionExpression(id=str(names[0]) if names else None, params=params,
                                        body=children[-1], **_position(meta))

    def _method(self, meta, children):
        key = next(c for c in children if isinstance(c, tuple))
        params = next((c for c in children if isinstance(c, list)), [])
        function = nodes.FunctionExpression(params=params, body=children[-1], **_position(meta))
        return key, function

    def params(self, meta, children):
        return list(children)

    def default_param(self, meta, children):
        return nodes.AssignmentPattern(left=children[0], right=children[1], **_position(meta))

    def rest_element(self, meta, children):
        return nodes.RestElement(argument=children[0], **_position(meta))

    def binding_name(self, meta, children):
        return nodes.Identifier(name=str(children[0]), **_position(meta))

    def object_pattern(self, meta, children):
        return nodes.ObjectPattern(properties=list(children), **_position(meta))

    def pattern_property(self, meta, children):
        key, computed = children[0]
        value = children[1]
        if len(children) > 2:
            value = nodes.AssignmentPattern(left=value, right=children[2], **_position(meta))
        return nodes.PatternProperty(key=None if computed else nodes.key_name(key), value=value,
                                     **_position(meta))

    def shorthand_pattern(self, meta, children):
        name = children[0]
        value = nodes.Identifier(name=str(name), **_token_position(name))
        if len(children) > 1:
            value = nodes.AssignmentPattern(left=value, right=children[1], **_position(meta))
        return nodes.PatternProperty(key=str(name), value=value, **_position(meta))

    def array_pattern(self, meta, children):
        return nodes.ArrayPattern(elements=list(children), **_position(meta))

    # --- Classes ---

    def class_expr(self, meta, children):
        decorators = [c for c in children if isinstance(c, nodes.Decorator)]
        names = _tokens(children, 'NAME')
        rest = [c for c in children if isinstance(c, nodes.Node) and not isinstance(c, nodes.Decorator)]
        superclass = rest[0] if rest else None
        return nodes.ClassExpression(id=str(names[0]) if names else None, superclass=superclass,
                                     body=children[-1], decorators=decorators, **_position(meta))

    def decorator(self, meta, children):
        return nodes.Decorator(expression=children[0], **_position(meta))

    def class_body(self, meta, children):
        return list(children)

    def class_method(self, meta, children):
        (key, computed), function = self._method(meta, children)
        return nodes.ClassMethod(key=key, value=function, computed=computed,
                                 static=bool(_tokens(children, 'STATIC')), **_position(meta))

    def class_property(self, meta, children):
        key, computed = next(c for c in children if isinstance(c, tuple))
        value = children[-1] if isinstance(children[-1], nodes.Node) else None
        if isinstance(value, nodes.Decorator):
            value = None
        return nodes.ClassProperty(key=key, value=value, computed=computed,
                                   static=bool(_tokens(children, 'STATIC')), **_position(meta))

    # --- JSX ---

    def jsx(self, meta, children):
        names = _tokens(children, 'JSX_NAME')
        return nodes.JSXElement(name=str(names[0]) if names else None, **_position(meta))


@lru_cache(maxsize=1)
def get_parser():
    """Build the Lark parser once; grammar compilation is the expensive part."""
    # Use Earley parser instead of LALR to handle grammar ambiguities
    return Lark(js_grammar, parser='earley', propagate_positions=True)


def parse_source(source_code, path=None):
    """Parse JavaScript source into a ``Program`` node.

    Raises:
        ParseError: when the source is outside the supported grammar
    """
    try:
        tree = get_parser().parse(source_code)
    except UnexpectedInput as e:
        line_number = getattr(e, 'line', None)
        column = getattr(e, 'column', None)
        if line_number is not None and line_number < 1:
            line_number = None
        raise ParseError(
            message="Syntax error",
            path=path,
            line_number=line_number,
            column=column,
            context=get_line_context(source_code, line_number),
            suggestion=detect_common_error_patterns(source_code) or "Check syntax around this line",
        ) from e

    try:
        return JsTreeBuilder().transform(tree)
    except VisitError as e:
        raise ParseError(
            message=f"Unsupported syntax: {e.orig_exc}",
            path=path,
            suggestion="Check syntax and types",
        ) from e

