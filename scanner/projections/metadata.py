"""
Component metadata projection (react-docgen style).

Produces ``{description, methods, displayName?, props?}`` for the default
export of a component module.
"""
from scanner import nodes
from scanner.descriptors import ObjectDescriptor, PrimitiveTypeDescriptor
from scanner.evaluator import Evaluator
from scanner.graph import LocalBinding
from scanner.verbose import debug_log

COMPUTED_DEFAULTS = (nodes.Identifier, nodes.MemberExpression, nodes.CallExpression)


def render_type(descriptor):
    """Render a PropTypes descriptor as a react-docgen ``type`` object."""
    rendered = {"name": descriptor.name}
    name = descriptor.name

    if name == "enum" and descriptor.enum_values is not None:
        rendered["value"] = [{"value": v.raw, "computed": v.computed} for v in descriptor.enum_values]
    elif name in ("shape", "exact") and descriptor.shape_of is not None:
        rendered["value"] = render_shape(descriptor.shape_of)
    elif name in ("arrayOf", "objectOf") and descriptor.of is not None:
        rendered["value"] = render_type(descriptor.of)
    elif name == "union" and descriptor.union_of is not None:
        rendered["value"] = [render_type(member) for member in descriptor.union_of]
    elif name == "custom":
        rendered["raw"] = descriptor.raw
    elif descriptor.raw is not None:
        rendered["value"] = descriptor.raw
        if descriptor.computed:
            rendered["computed"] = True
    return rendered


def render_shape(shape):
    value = {}
    for prop in shape.properties:
        if not isinstance(prop.value, PrimitiveTypeDescriptor):
            continue
        entry = render_type(prop.value)
        entry["required"] = prop.required
        if prop.description:
            entry["description"] = prop.description
        value[prop.name] = entry
    return value


def default_values(evaluator, binding):
    """``{prop: {value, computed}}`` from a component's ``defaultProps``."""
    static = evaluator.static_member(binding, "defaultProps")
    if static is None:
        return {}
    node, module = static
    node = nodes.unwrap_parens(node)
    if isinstance(node, nodes.Identifier):
        declaration = evaluator.declaration(node, module)
        if declaration is None:
            return {}
        node = nodes.unwrap_parens(declaration.node)
        module = evaluator.graph.load(declaration.module_path)
    if not isinstance(node, nodes.ObjectExpression):
        return {}

    values = {}
    for prop in node.properties:
        if not isinstance(prop, nodes.Property):
            continue
        name = nodes.key_name(prop.key, prop.computed)
        if name is None:
            continue
        value = nodes.unwrap_parens(prop.value)
        values[name] = {
            "value": module.source_text(value),
            "computed": isinstance(value, COMPUTED_DEFAULTS),
        }
    return values


def parse_metadata(graph, path, evaluator=None):
    """Describe the component exported by default from ``path``."""
    evaluator = evaluator or Evaluator(graph)
    binding = evaluator.resolver.resolve(graph.get_export(path, "default"))
    result = {"description": "", "methods": []}
    if not isinstance(binding, LocalBinding):
        debug_log(f"Default export of {path} is not declared locally ({binding.kind})")
        return result

    result["description"] = evaluator.description(binding)
    node = nodes.unwrap_parens(binding.node)
    if isinstance(node, nodes.ClassDeclaration):
        result["displayName"] = node.id

    static = evaluator.static_member(binding, "propTypes")
    if static is None:
        return result

    prop_types = evaluator.evaluate(static[0], static[1], prop_types=True)
    if not isinstance(prop_types, ObjectDescriptor):
        debug_log(f"propTypes of {path} could not be evaluated: {getattr(prop_types, 'reason', prop_types.kind)}")
        return result

    defaults = default_values(evaluator, binding)
    props = {}
    for prop in prop_types.properties:
        if not isinstance(prop.value, PrimitiveTypeDescriptor):
            debug_log(f"  omitting prop `{prop.name}`: {getattr(prop.value, 'reason', prop.value.kind)}")
            continue
        entry = {
            "description": prop.description,
            "required": prop.required,
            "type": render_type(prop.value),
        }
        if prop.name in defaults:
            entry["defaultValue"] = defaults[prop.name]
        props[prop.name] = entry
    result["props"] = props
    return result
