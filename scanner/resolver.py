"""
Binding resolution.

Follows a binding through local aliases, imports and re-exports until it
reaches something concrete: a local declaration, a namespace import, or an
import of an external package.
"""
from scanner import nodes
from scanner.errors import CyclicExportError, UnresolvedExportError
from scanner.graph import (
    IMPORT_BINDINGS,
    ImportedDefaultBinding,
    ImportedNamedBinding,
    LocalBinding,
    NamespaceBinding,
    ReExportedBinding,
)
from scanner.verbose import debug_log


class BindingResolver:
    """
    Resolves bindings against a ``ModuleGraph``.

    The chain of (module path, name) pairs being followed is tracked so a
    cycle raises ``CyclicExportError`` instead of recursing forever, and the
    chain may not grow beyond ``config.max_hops``.
    """

    def __init__(self, graph):
        self.graph = graph
        self.max_hops = graph.config.max_hops

    def resolve(self, binding):
        return self._resolve(binding, [])

    def resolve_identifier(self, module, name):
        """Resolve a name in a module's top-level scope; None if undeclared."""
        binding = module.scope.get(name)
        if binding is None:
            return None
        return self.resolve(binding)

    def resolve_import(self, module, name):
        """
        Follow in-module aliases of ``name`` to the import that introduces it.

        Imported modules are not loaded. Returns None if the name does not
        trace back to an import.
        """
        seen = set()
        binding = module.scope.get(name)
        while isinstance(binding, LocalBinding) and isinstance(binding.node, nodes.Identifier):
            target = binding.node.name
            if target in seen:
                return None
            seen.add(target)
            binding = module.scope.get(target)
        if isinstance(binding, IMPORT_BINDINGS):
            return binding
        return None

    def _enter(self, chain, key):
        if key in chain:
            raise CyclicExportError(chain + [key])
        if len(chain) >= self.max_hops:
            raise CyclicExportError(chain + [key], reason=f"export chain longer than {self.max_hops} hops")
        return chain + [key]

    def _resolve(self, binding, chain):
        if isinstance(binding, NamespaceBinding):
            return binding

        if isinstance(binding, LocalBinding):
            node = binding.node
            if not isinstance(node, nodes.Identifier):
                return binding
            # local alias: `export default X`, `export {a as b}`, `const a = b`
            exported = binding.statement is not None and binding.statement.type.startswith("Export")
            key = (binding.module_path, binding.name, "export") if exported else (binding.module_path, binding.name)
            chain = self._enter(chain, key)
            module = self.graph.load(binding.module_path)
            target = module.scope.get(node.name)
            if target is None:
                # `export {missing}` names nothing; `export default window` is a global
                if _is_export_specifier(binding):
                    raise UnresolvedExportError(node.name, module.path)
                return binding
            if target is binding:
                return binding
            debug_log(f"  alias {binding.name} -> {node.name} in {module.path}")
            return self._resolve(target, chain)

        if isinstance(binding, ReExportedBinding):
            chain = self._enter(chain, (binding.module_path, binding.name, "export"))
            target_path = self.graph.resolve_specifier(binding.module_path, binding.source)
            if target_path is None:
                return binding
            debug_log(f"  re-export {binding.name} -> {binding.source}#{binding.imported}")
            return self._resolve(self.graph.get_export(target_path, binding.imported), chain)

        if isinstance(binding, (ImportedDefaultBinding, ImportedNamedBinding)):
            target_path = self.graph.resolve_specifier(binding.module_path, binding.source)
            if target_path is None:
                # external package, never loaded
                return binding
            chain = self._enter(chain, (binding.module_path, binding.name))
            imported = binding.imported if isinstance(binding, ImportedNamedBinding) else "default"
            if binding.require and imported == "default":
                module = self.graph.load(target_path)
                if "default" not in module.exports:
                    return NamespaceBinding(module_path=binding.module_path, name=binding.name,
                                            source=binding.source)
            debug_log(f"  import {binding.name} -> {binding.source}#{imported}")
            return self._resolve(self.graph.get_export(target_path, imported), chain)

        return binding


def _is_export_specifier(binding):
    statement = binding.statement
    return isinstance(statement, nodes.ExportNamedDeclaration) and statement.declaration is None
