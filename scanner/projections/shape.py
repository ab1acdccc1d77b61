"""
Generic shape projection.

Describes an exported object (or the object a function export returns) as a
list of ``{name, type: 'object', props}`` and ``{name, type: 'function',
args}`` entries. Used for testkit drivers.
"""
from scanner.descriptors import FunctionDescriptor, ObjectDescriptor
from scanner.evaluator import Evaluator
from scanner.verbose import debug_log


def describe_properties(descriptor):
    entries = []
    for prop in descriptor.properties:
        value = prop.value
        # factories are described by what they build
        if isinstance(value, FunctionDescriptor) and isinstance(value.return_descriptor, ObjectDescriptor):
            value = value.return_descriptor

        if isinstance(value, ObjectDescriptor):
            entries.append({"name": prop.name, "type": "object", "props": describe_properties(value)})
        elif isinstance(value, FunctionDescriptor):
            entries.append({
                "name": prop.name,
                "type": "function",
                "args": [{"name": name} for name in value.parameter_names],
            })
        else:
            debug_log(f"  omitting `{prop.name}`: {getattr(value, 'reason', value.kind)}")
    return entries


def describe_exports(graph, path, evaluator=None):
    """Shape of the default export of ``path`` (or its first named export)."""
    evaluator = evaluator or Evaluator(graph)
    module = graph.load(path)
    if "default" in module.exports:
        binding = module.exports["default"]
    elif module.exports:
        binding = next(iter(module.exports.values()))
    else:
        debug_log(f"{module.path} has no exports")
        return []

    descriptor = evaluator.evaluate_binding(binding)
    if isinstance(descriptor, FunctionDescriptor):
        descriptor = descriptor.return_descriptor
    if not isinstance(descriptor, ObjectDescriptor):
        return []
    return describe_properties(descriptor)
