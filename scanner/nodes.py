"""
Typed syntax tree for the JavaScript subset.

Every node kind the tree builder can produce is a pydantic model with a fixed
``type`` tag, so the resolver and evaluator can dispatch on it. Positions are
character offsets into the module source (``start`` inclusive, ``end``
exclusive) and are ``None`` for nodes synthesized after parsing.
"""

from typing import Any, List, Literal as LiteralType, Optional

from pydantic import BaseModel


class Node(BaseModel):
    """Base class for all syntax nodes."""
    type: str = "Node"
    start: Optional[int] = None
    end: Optional[int] = None
    line: Optional[int] = None


# --- Module level ---

class Program(Node):
    type: LiteralType["Program"] = "Program"
    body: List[Node] = []


class ImportSpecifier(Node):
    type: LiteralType["ImportSpecifier"] = "ImportSpecifier"
    kind: LiteralType["default", "named", "namespace"]
    imported: Optional[str] = None
    local: str


class ImportDeclaration(Node):
    type: LiteralType["ImportDeclaration"] = "ImportDeclaration"
    source: str
    specifiers: List[ImportSpecifier] = []


class ExportSpecifier(Node):
    type: LiteralType["ExportSpecifier"] = "ExportSpecifier"
    local: str
    exported: str


class ExportNamedDeclaration(Node):
    type: LiteralType["ExportNamedDeclaration"] = "ExportNamedDeclaration"
    declaration: Optional[Node] = None
    specifiers: List[ExportSpecifier] = []
    source: Optional[str] = None


class ExportDefaultDeclaration(Node):
    type: LiteralType["ExportDefaultDeclaration"] = "ExportDefaultDeclaration"
    declaration: Node


class ExportAllDeclaration(Node):
    type: LiteralType["ExportAllDeclaration"] = "ExportAllDeclaration"
    source: str
    exported: Optional[str] = None


# --- Statements ---

class VariableDeclarator(Node):
    type: LiteralType["VariableDeclarator"] = "VariableDeclarator"
    id: Node
    init: Optional[Node] = None


class VariableDeclaration(Node):
    type: LiteralType["VariableDeclaration"] = "VariableDeclaration"
    kind: str
    declarations: List[VariableDeclarator] = []


class BlockStatement(Node):
    type: LiteralType["BlockStatement"] = "BlockStatement"
    body: List[Node] = []


class ExpressionStatement(Node):
    type: LiteralType["ExpressionStatement"] = "ExpressionStatement"
    expression: Node


class ReturnStatement(Node):
    type: LiteralType["ReturnStatement"] = "ReturnStatement"
    argument: Optional[Node] = None


class IfStatement(Node):
    type: LiteralType["IfStatement"] = "IfStatement"
    test: Node
    consequent: Node
    alternate: Optional[Node] = None


class LoopStatement(Node):
    """for / for-in / for-of / while / do-while; only the body matters here."""
    type: LiteralType["LoopStatement"] = "LoopStatement"
    body: Node


class SwitchCase(Node):
    type: LiteralType["SwitchCase"] = "SwitchCase"
    test: Optional[Node] = None
    consequent: List[Node] = []


class SwitchStatement(Node):
    type: LiteralType["SwitchStatement"] = "SwitchStatement"
    discriminant: Node
    cases: List[SwitchCase] = []


class CatchClause(Node):
    type: LiteralType["CatchClause"] = "CatchClause"
    param: Optional[Node] = None
    body: BlockStatement


class TryStatement(Node):
    type: LiteralType["TryStatement"] = "TryStatement"
    block: BlockStatement
    handler: Optional[CatchClause] = None
    finalizer: Optional[BlockStatement] = None


class ThrowStatement(Node):
    type: LiteralType["ThrowStatement"] = "ThrowStatement"
    argument: Node


class JumpStatement(Node):
    """break / continue"""
    type: LiteralType["JumpStatement"] = "JumpStatement"
    keyword: str
    label: Optional[str] = None


class EmptyStatement(Node):
    type: LiteralType["EmptyStatement"] = "EmptyStatement"


# --- Patterns ---

class Identifier(Node):
    type: LiteralType["Identifier"] = "Identifier"
    name: str


class PatternProperty(Node):
    type: LiteralType["PatternProperty"] = "PatternProperty"
    key: Optional[str] = None
    value: Node


class ObjectPattern(Node):
    type: LiteralType["ObjectPattern"] = "ObjectPattern"
    properties: List[Node] = []


class ArrayPattern(Node):
    type: LiteralType["ArrayPattern"] = "ArrayPattern"
    elements: List[Node] = []


class AssignmentPattern(Node):
    type: LiteralType["AssignmentPattern"] = "AssignmentPattern"
    left: Node
    right: Node


class RestElement(Node):
    type: LiteralType["RestElement"] = "RestElement"
    argument: Node


# --- Expressions ---

class Literal(Node):
    type: LiteralType["Literal"] = "Literal"
    value: Any = None
    raw: str


class TemplateLiteral(Node):
    """A template string. ``value`` is set only when it has no ``${}`` parts."""
    type: LiteralType["TemplateLiteral"] = "TemplateLiteral"
    raw: str
    value: Optional[str] = None


class ThisExpression(Node):
    type: LiteralType["ThisExpression"] = "ThisExpression"


class Super(Node):
    type: LiteralType["Super"] = "Super"


class ParenthesizedExpression(Node):
    type: LiteralType["ParenthesizedExpression"] = "ParenthesizedExpression"
    expression: Node


class SpreadElement(Node):
    type: LiteralType["SpreadElement"] = "SpreadElement"
    argument: Node


class Property(Node):
    type: LiteralType["Property"] = "Property"
    key: Node
    value: Node
    computed: bool = False
    shorthand: bool = False
    method: bool = False


class ObjectExpression(Node):
    type: LiteralType["ObjectExpression"] = "ObjectExpression"
    properties: List[Node] = []


class ArrayExpression(Node):
    type: LiteralType["ArrayExpression"] = "ArrayExpression"
    elements: List[Node] = []


class FunctionExpression(Node):
    type: LiteralType["FunctionExpression"] = "FunctionExpression"
    id: Optional[str] = None
    params: List[Node] = []
    body: BlockStatement


class FunctionDeclaration(Node):
    type: LiteralType["FunctionDeclaration"] = "FunctionDeclaration"
    id: str
    params: List[Node] = []
    body: BlockStatement


class ArrowFunctionExpression(Node):
    type: LiteralType["ArrowFunctionExpression"] = "ArrowFunctionExpression"
    params: List[Node] = []
    body: Node
    expression: bool = False


class Decorator(Node):
    type: LiteralType["Decorator"] = "Decorator"
    expression: Node


class ClassProperty(Node):
    type: LiteralType["ClassProperty"] = "ClassProperty"
    key: Node
    value: Optional[Node] = None
    computed: bool = False
    static: bool = False


class ClassMethod(Node):
    type: LiteralType["ClassMethod"] = "ClassMethod"
    key: Node
    value: FunctionExpression
    computed: bool = False
    static: bool = False


class ClassExpression(Node):
    type: LiteralType["ClassExpression"] = "ClassExpression"
    id: Optional[str] = None
    superclass: Optional[Node] = None
    body: List[Node] = []
    decorators: List[Decorator] = []


class ClassDeclaration(Node):
    type: LiteralType["ClassDeclaration"] = "ClassDeclaration"
    id: str
    superclass: Optional[Node] = None
    body: List[Node] = []
    decorators: List[Decorator] = []


class CallExpression(Node):
    type: LiteralType["CallExpression"] = "CallExpression"
    callee: Node
    arguments: List[Node] = []


class NewExpression(Node):
    type: LiteralType["NewExpression"] = "NewExpression"
    callee: Node
    arguments: List[Node] = []


class TaggedTemplateExpression(Node):
    type: LiteralType["TaggedTemplateExpression"] = "TaggedTemplateExpression"
    tag: Node
    quasi: TemplateLiteral


class MemberExpression(Node):
    type: LiteralType["MemberExpression"] = "MemberExpression"
    object: Node
    property: Node
    computed: bool = False


class AssignmentExpression(Node):
    type: LiteralType["AssignmentExpression"] = "AssignmentExpression"
    operator: str
    left: Node
    right: Node


class ConditionalExpression(Node):
    type: LiteralType["ConditionalExpression"] = "ConditionalExpression"
    test: Node
    consequent: Node
    alternate: Node


class BinaryExpression(Node):
    """A flat operator chain such as ``a + b * c``; precedence is not modelled."""
    type: LiteralType["BinaryExpression"] = "BinaryExpression"
    operators: List[str] = []
    operands: List[Node] = []


class UnaryExpression(Node):
    """Prefix/postfix operators plus ``await`` and ``yield``."""
    type: LiteralType["UnaryExpression"] = "UnaryExpression"
    operator: str
    argument: Optional[Node] = None
    prefix: bool = True


class JSXElement(Node):
    type: LiteralType["JSXElement"] = "JSXElement"
    name: Optional[str] = None


FUNCTION_TYPES = ("FunctionExpression", "FunctionDeclaration", "ArrowFunctionExpression")
CLASS_TYPES = ("ClassExpression", "ClassDeclaration")


def unwrap_parens(node):
    """Strip any number of wrapping parentheses."""
    while isinstance(node, ParenthesizedExpression):
        node = node.expression
    return node


def key_name(key, computed=False):
    """Static name of an object/class key, or None when it is computed."""
    if isinstance(key, Identifier) and not computed:
        return key.name
    if isinstance(key, Literal) and isinstance(key.value, (str, int, float)):
        value = key.value
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return str(value)
    if isinstance(key, TemplateLiteral) and key.value is not None:
        return key.value
    return None


def member_name(node):
    """Property name of a member expression (``a.b`` or ``a['b']``)."""
    return key_name(node.property, node.computed)


def iter_returns(statement):
    """Yield the return statements of a function body, skipping nested functions."""
    if statement is None:
        return
    if isinstance(statement, ReturnStatement):
        yield statement
    elif isinstance(statement, BlockStatement):
        for child in statement.body:
            yield from iter_returns(child)
    elif isinstance(statement, IfStatement):
        yield from iter_returns(statement.consequent)
        yield from iter_returns(statement.alternate)
    elif isinstance(statement, LoopStatement):
        yield from iter_returns(statement.body)
    elif isinstance(statement, SwitchStatement):
        for case in statement.cases:
            for child in case.consequent:
                yield from iter_returns(child)
    elif isinstance(statement, TryStatement):
        yield from iter_returns(statement.block)
        if statement.handler is not None:
            yield from iter_returns(statement.handler.body)
        yield from iter_returns(statement.finalizer)
