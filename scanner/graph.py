"""
Module graph.

Loads modules through a source provider, parses each one once and collects
its top-level bindings: what every local name refers to (``scope``) and what
the module exports (``exports``). Resolution across modules is left to
``scanner.resolver``; this module only records where each name points.
"""
import os
from typing import Optional

from pydantic import BaseModel

from scanner import nodes
from scanner.comments import collect_comments
from scanner.config import ScanConfig
from scanner.errors import UnresolvedExportError
from scanner.source import FileSourceProvider
from scanner.syntax import parse_source
from scanner.verbose import debug_log


# --- Bindings ---

class Binding(BaseModel):
    """What a name in a module refers to."""
    kind: str
    module_path: str
    name: str


class LocalBinding(Binding):
    """
    A value declared in the module itself.

    ``node`` is the declaration or value expression (an ``Identifier`` when
    the binding is an alias of another local name) and ``statement`` is the
    top-level statement that owns the leading comment.
    """
    kind: str = "local"
    node: Optional[nodes.Node] = None
    statement: Optional[nodes.Node] = None


class ImportedDefaultBinding(Binding):
    kind: str = "import-default"
    source: str
    require: bool = False


class ImportedNamedBinding(Binding):
    kind: str = "import-named"
    source: str
    imported: str
    require: bool = False


class NamespaceBinding(Binding):
    kind: str = "namespace"
    source: str


class ReExportedBinding(Binding):
    kind: str = "re-export"
    source: str
    imported: str


IMPORT_BINDINGS = (ImportedDefaultBinding, ImportedNamedBinding, NamespaceBinding)


# --- Modules ---

class Module:
    """A parsed module and its collected bindings."""

    def __init__(self, path, source, program, comments):
        self.path = path
        self.source = source
        self.program = program
        self.comments = comments
        self.scope = {}
        self.exports = {}
        self.star_sources = []
        self.statics = {}

    def __repr__(self):
        return f"Module({self.path!r}, exports={list(self.exports)})"

    def leading_comment(self, node):
        """Normalized block comment directly before ``node``, or ''."""
        if node is None or node.start is None:
            return ""
        return self.comments.get(node.start, "")

    def source_text(self, node):
        if node is None or node.start is None or node.end is None:
            return ""
        return self.source[node.start:node.end]


def require_source(node):
    """Specifier of a ``require('x')`` call, else None."""
    node = nodes.unwrap_parens(node)
    if (isinstance(node, nodes.CallExpression)
            and isinstance(node.callee, nodes.Identifier)
            and node.callee.name == "require"
            and len(node.arguments) == 1
            and isinstance(node.arguments[0], nodes.Literal)
            and isinstance(node.arguments[0].value, str)):
        return node.arguments[0].value
    return None


def _is_module_exports(node):
    return (isinstance(node, nodes.MemberExpression)
            and isinstance(node.object, nodes.Identifier)
            and node.object.name == "module"
            and nodes.member_name(node) == "exports")


def _declared_names(pattern):
    if isinstance(pattern, nodes.Identifier):
        yield pattern.name
    elif isinstance(pattern, nodes.ObjectPattern):
        for prop in pattern.properties:
            yield from _declared_names(prop)
    elif isinstance(pattern, nodes.ArrayPattern):
        for element in pattern.elements:
            yield from _declared_names(element)
    elif isinstance(pattern, nodes.AssignmentPattern):
        yield from _declared_names(pattern.left)
    elif isinstance(pattern, nodes.PatternProperty):
        yield from _declared_names(pattern.value)
    elif isinstance(pattern, nodes.RestElement):
        yield from _declared_names(pattern.argument)


class _BindingCollector:
    """Walks a module's top-level statements and fills scope/exports/statics."""

    def __init__(self, module):
        self.module = module

    def local(self, name, node, statement):
        return LocalBinding(module_path=self.module.path, name=name, node=node, statement=statement)

    def collect(self):
        for statement in self.module.program.body:
            handler = getattr(self, "_collect_" + statement.type, None)
            if handler:
                handler(statement)
        return self.module

    # imports

    def _collect_ImportDeclaration(self, statement):
        path = self.module.path
        for spec in statement.specifiers:
            if spec.kind == "namespace":
                binding = NamespaceBinding(module_path=path, name=spec.local, source=statement.source)
            elif spec.kind == "default":
                binding = ImportedDefaultBinding(module_path=path, name=spec.local, source=statement.source)
            else:
                binding = ImportedNamedBinding(module_path=path, name=spec.local,
                                               source=statement.source, imported=spec.imported)
            self.module.scope[spec.local] = binding

    # declarations

    def _collect_VariableDeclaration(self, statement, owner=None):
        owner = owner or statement
        declared = []
        for declarator in statement.declarations:
            declared.extend(self._bind_pattern(declarator.id, declarator.init, owner))
        return declared

    def _collect_FunctionDeclaration(self, statement, owner=None):
        self.module.scope[statement.id] = self.local(statement.id, statement, owner or statement)
        return [statement.id]

    _collect_ClassDeclaration = _collect_FunctionDeclaration

    def _bind_pattern(self, pattern, init, statement):
        """Bind every name in a declaration pattern; returns the names."""
        if isinstance(pattern, nodes.Identifier):
            self.module.scope[pattern.name] = self._bind_value(pattern.name, init, statement)
            return [pattern.name]
        if isinstance(pattern, nodes.AssignmentPattern):
            return self._bind_pattern(pattern.left, init, statement)
        if init is None:
            names = list(_declared_names(pattern))
            for name in names:
                self.module.scope[name] = self.local(name, None, statement)
            return names

        names = []
        if isinstance(pattern, nodes.ObjectPattern):
            for prop in pattern.properties:
                if isinstance(prop, nodes.PatternProperty) and prop.key is not None:
                    member = nodes.MemberExpression(object=init, property=nodes.Identifier(name=prop.key))
                    names.extend(self._bind_pattern(prop.value, member, statement))
                else:
                    names.extend(self._bind_pattern(prop, None, statement))
        elif isinstance(pattern, nodes.ArrayPattern):
            for index, element in enumerate(pattern.elements):
                if isinstance(element, nodes.RestElement):
                    names.extend(self._bind_pattern(element, None, statement))
                    continue
                member = nodes.MemberExpression(object=init, computed=True,
                                                property=nodes.Literal(value=index, raw=str(index)))
                names.extend(self._bind_pattern(element, member, statement))
        return names

    def _bind_value(self, name, init, statement):
        path = self.module.path
        source = require_source(init)
        if source is not None:
            return ImportedDefaultBinding(module_path=path, name=name, source=source, require=True)
        if isinstance(init, nodes.MemberExpression) and not init.computed:
            source = require_source(init.object)
            if source is not None:
                return ImportedNamedBinding(module_path=path, name=name, source=source,
                                            imported=nodes.member_name(init), require=True)
        return self.local(name, init, statement)

    # exports

    def _collect_ExportDefaultDeclaration(self, statement):
        declaration = statement.declaration
        if isinstance(declaration, (nodes.FunctionDeclaration, nodes.ClassDeclaration)):
            self._collect_FunctionDeclaration(declaration, owner=statement)
        self.module.exports["default"] = self.local("default", declaration, statement)

    def _collect_ExportNamedDeclaration(self, statement):
        path = self.module.path
        declaration = statement.declaration
        if declaration is not None:
            collect = getattr(self, "_collect_" + declaration.type, None)
            for name in (collect(declaration, owner=statement) if collect else []):
                binding = self.module.scope.get(name)
                if binding is not None:
                    self.module.exports[name] = binding
            return

        for spec in statement.specifiers:
            if statement.source is not None:
                self.module.exports[spec.exported] = ReExportedBinding(
                    module_path=path, name=spec.exported, source=statement.source, imported=spec.local)
            else:
                alias = nodes.Identifier(name=spec.local, start=spec.start, end=spec.end, line=spec.line)
                self.module.exports[spec.exported] = self.local(spec.exported, alias, statement)

    def _collect_ExportAllDeclaration(self, statement):
        if statement.exported is None:
            self.module.star_sources.append(statement.source)
        else:
            self.module.exports[statement.exported] = NamespaceBinding(
                module_path=self.module.path, name=statement.exported, source=statement.source)

    # assignments: CommonJS exports and statics

    def _collect_ExpressionStatement(self, statement):
        expression = statement.expression
        if not isinstance(expression, nodes.AssignmentExpression) or expression.operator != "=":
            return
        left, right = expression.left, expression.right
        if not isinstance(left, nodes.MemberExpression):
            return

        if _is_module_exports(left):
            self.module.exports["default"] = self._bind_value("default", right, statement)
            return

        name = nodes.member_name(left)
        if name is None:
            return
        target = left.object
        if _is_module_exports(target) or (isinstance(target, nodes.Identifier) and target.name == "exports"):
            self.module.exports[name] = self._bind_value(name, right, statement)
        elif isinstance(target, nodes.Identifier):
            self.module.statics.setdefault(target.name, {})[name] = right


def collect_bindings(module):
    """Populate ``module.scope``, ``exports``, ``star_sources`` and ``statics``."""
    return _BindingCollector(module).collect()


# --- Graph ---

class ModuleGraph:
    """
    Per-request module cache.

    Every module is read once and parsed once; later lookups hit the cache.
    A graph is not shared between requests.
    """

    def __init__(self, provider=None, config=None):
        self.config = config or ScanConfig()
        self.provider = provider or FileSourceProvider(self.config.entry_file_name)
        self.modules = {}

    def canonical_path(self, path):
        path = os.path.abspath(path)
        if path not in self.modules and self.provider.is_dir(path):
            path = os.path.join(path, self.config.entry_file_name)
        return path

    def load(self, path):
        """Load (or fetch from cache) the module at ``path``."""
        key = self.canonical_path(path)
        if key in self.modules:
            return self.modules[key]
        text = self.provider.read(path)
        return self.add_source(key, text)

    def add_source(self, path, text):
        """Parse ``text`` as the module at ``path`` and cache it."""
        path = os.path.abspath(path)
        debug_log(f"Parsing {path}")
        module = Module(path, text, parse_source(text, path), collect_comments(text))
        collect_bindings(module)
        debug_log(f"  exports: {list(module.exports)}, star: {module.star_sources}")
        self.modules[path] = module
        return module

    def resolve_specifier(self, from_path, specifier):
        """
        Resolve an import specifier relative to the importing module.

        Returns:
            Absolute module path, or None for bare package specifiers and
            non-script assets
        """
        if not (specifier.startswith(".") or os.path.isabs(specifier)):
            return None
        base = os.path.normpath(os.path.join(os.path.dirname(from_path), specifier))
        if base in self.modules:
            return base

        exists, is_dir = self.provider.exists, self.provider.is_dir
        if exists(base) and not is_dir(base):
            extension = os.path.splitext(base)[1]
            if extension and extension not in self.config.extensions:
                # stylesheets, images, json: never parsed
                return None
            return base
        for ext in self.config.extensions:
            if exists(base + ext) and not is_dir(base + ext):
                return base + ext
        if is_dir(base):
            for name in [self.config.entry_file_name] + ["index" + ext for ext in self.config.extensions]:
                candidate = os.path.join(base, name)
                if exists(candidate):
                    return candidate
        # let load() report the missing module
        return base

    def get_export(self, path, name="default", _seen=None):
        """
        Exported binding ``name`` of the module at ``path``.

        Names not exported directly are looked up through ``export *``
        sources (never ``default``).

        Raises:
            UnresolvedExportError: if no such export exists
        """
        module = self.load(path)
        if name in module.exports:
            return module.exports[name]

        if name != "default":
            seen = _seen if _seen is not None else set()
            seen.add(module.path)
            for specifier in module.star_sources:
                target = self.resolve_specifier(module.path, specifier)
                if target is None or target in seen:
                    continue
                try:
                    return self.get_export(target, name, seen)
                except UnresolvedExportError:
                    continue
        raise UnresolvedExportError(name, module.path)
