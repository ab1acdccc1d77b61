"""Story config projection: where is the component implemented?"""
from scanner import nodes
from scanner.descriptors import LiteralDescriptor
from scanner.errors import UnresolvableComponentPathError, UnresolvedExportError
from scanner.evaluator import Evaluator
from scanner.graph import LocalBinding


def _config_property(config, name):
    """Value node of the last ``name`` property of an object literal."""
    found = None
    for prop in config.properties:
        if isinstance(prop, nodes.Property) and nodes.key_name(prop.key, prop.computed) == name:
            found = prop.value
    return found


def find_component_path(graph, path, evaluator=None):
    """
    Path of the component a story config documents.

    The default export must be an object literal, directly or through a
    variable. Its ``componentPath`` string wins; otherwise the import source
    of the ``component`` identifier is returned.

    Raises:
        UnresolvableComponentPathError: if neither can be determined
    """
    evaluator = evaluator or Evaluator(graph)
    try:
        binding = evaluator.resolver.resolve(graph.get_export(path, "default"))
    except UnresolvedExportError:
        raise UnresolvableComponentPathError(path)

    config = nodes.unwrap_parens(binding.node) if isinstance(binding, LocalBinding) else None
    if not isinstance(config, nodes.ObjectExpression):
        raise UnresolvableComponentPathError(path)
    module = graph.load(binding.module_path)

    component_path = _config_property(config, "componentPath")
    if component_path is not None:
        value = evaluator.evaluate(component_path, module)
        if isinstance(value, LiteralDescriptor) and isinstance(value.value, str):
            return value.value

    component = nodes.unwrap_parens(_config_property(config, "component"))
    if isinstance(component, nodes.Identifier):
        imported = evaluator.resolver.resolve_import(module, component.name)
        if imported is not None:
            return imported.source

    raise UnresolvableComponentPathError(path)
