"""
Partial evaluation of syntax nodes into descriptors.

Only a restricted set of forms is understood: literals, object literals
(with spreads), functions and classes, identifiers resolved across modules,
member access, calls of functions whose return value is known, and the
PropTypes vocabulary. Everything else evaluates to ``Unevaluatable``; the
evaluator never raises for unsupported code.
"""
from scanner import nodes
from scanner.descriptors import (
    FunctionDescriptor,
    LiteralDescriptor,
    ObjectDescriptor,
    ObjectProperty,
    PrimitiveTypeDescriptor,
    Unevaluatable,
    merge_properties,
)
from scanner.graph import (
    ImportedDefaultBinding,
    ImportedNamedBinding,
    LocalBinding,
    NamespaceBinding,
    require_source,
)
from scanner.resolver import BindingResolver
from scanner.verbose import debug_log

PROP_TYPES_CALLS = ("oneOf", "oneOfType", "shape", "exact", "arrayOf", "objectOf", "instanceOf")


def parameter_names(params):
    """Names of function parameters; destructured ones become ``arg<index>``."""
    names = []
    for index, param in enumerate(params):
        target = param
        if isinstance(target, nodes.RestElement):
            target = target.argument
        if isinstance(target, nodes.AssignmentPattern):
            target = target.left
        names.append(target.name if isinstance(target, nodes.Identifier) else f"arg{index}")
    return names


def is_literal(node):
    node = nodes.unwrap_parens(node)
    if isinstance(node, nodes.Literal):
        return True
    if isinstance(node, nodes.TemplateLiteral):
        return node.value is not None
    return (isinstance(node, nodes.UnaryExpression) and node.operator in ("-", "+")
            and isinstance(node.argument, nodes.Literal))


class Evaluator:
    """
    Evaluates nodes of modules in a ``ModuleGraph``.

    Evaluation in ``prop_types`` mode reads object property values as
    PropTypes declarations (``PropTypes.bool.isRequired``) instead of values.
    """

    def __init__(self, graph, resolver=None):
        self.graph = graph
        self.resolver = resolver or BindingResolver(graph)
        self.prop_types_modules = set(graph.config.prop_types_modules)
        self._active = set()

    # --- Entry points ---

    def evaluate(self, node, module, prop_types=False):
        node = nodes.unwrap_parens(node)
        if node is None:
            return Unevaluatable(reason="no value")
        handler = getattr(self, "_eval_" + node.type, None)
        if handler is None:
            return Unevaluatable(reason=f"unsupported expression {node.type} at {module.path}:{node.line}")

        key = (module.path, id(node), prop_types)
        if key in self._active:
            return Unevaluatable(reason=f"cyclic value at {module.path}:{node.line}")
        self._active.add(key)
        try:
            return handler(node, module, prop_types)
        finally:
            self._active.discard(key)

    def evaluate_binding(self, binding, prop_types=False):
        binding = self.resolver.resolve(binding)
        if isinstance(binding, NamespaceBinding):
            return self._namespace(binding, prop_types)
        if isinstance(binding, LocalBinding):
            if binding.node is None:
                return Unevaluatable(reason=f"`{binding.name}` is declared without a value")
            return self.evaluate(binding.node, self.graph.load(binding.module_path), prop_types)
        return Unevaluatable(reason=f"`{binding.name}` comes from external module '{binding.source}'")

    def description(self, binding):
        """Leading comment of the declaration a binding resolves to."""
        binding = self.resolver.resolve(binding)
        if not isinstance(binding, LocalBinding):
            return ""
        module = self.graph.load(binding.module_path)
        return module.leading_comment(binding.statement) or module.leading_comment(binding.node)

    def declaration(self, node, module):
        """The local binding an expression refers to, or None."""
        node = nodes.unwrap_parens(node)
        if isinstance(node, nodes.Identifier):
            binding = module.scope.get(node.name)
            if binding is None:
                return None
            binding = self.resolver.resolve(binding)
            if isinstance(binding, LocalBinding) and binding.node is not None:
                return binding
            return None
        if node is not None and node.type in nodes.FUNCTION_TYPES + nodes.CLASS_TYPES:
            return LocalBinding(module_path=module.path, name=getattr(node, "id", None) or "", node=node)
        return None

    def static_member(self, binding, member):
        """
        ``(node, module)`` of a static member of a declaration.

        Looks at static class fields and methods first, then at top-level
        ``Name.member = value`` assignments.
        """
        module = self.graph.load(binding.module_path)
        node = nodes.unwrap_parens(binding.node)
        if node is not None and node.type in nodes.CLASS_TYPES:
            for item in node.body:
                if (isinstance(item, (nodes.ClassProperty, nodes.ClassMethod)) and item.static
                        and item.value is not None and nodes.key_name(item.key, item.computed) == member):
                    return item.value, module

        names = [binding.name]
        if getattr(node, "id", None):
            names.append(node.id)
        for name in names:
            statics = module.statics.get(name)
            if statics and member in statics:
                return statics[member], module
        return None

    # --- Values ---

    def _eval_Literal(self, node, module, prop_types):
        return LiteralDescriptor(value=node.value, raw=node.raw)

    def _eval_TemplateLiteral(self, node, module, prop_types):
        if node.value is None:
            return Unevaluatable(reason="template literal with expressions")
        return LiteralDescriptor(value=node.value, raw=node.raw)

    def _eval_UnaryExpression(self, node, module, prop_types):
        if is_literal(node) and isinstance(node.argument.value, (int, float)):
            value = node.argument.value
            return LiteralDescriptor(value=-value if node.operator == "-" else value,
                                     raw=module.source_text(node) or node.operator + node.argument.raw)
        return Unevaluatable(reason=f"operator `{node.operator}`")

    def _eval_Identifier(self, node, module, prop_types):
        if node.name == "undefined" and "undefined" not in module.scope:
            return LiteralDescriptor(value=None, raw="undefined")
        binding = module.scope.get(node.name)
        if binding is None:
            return Unevaluatable(reason=f"`{node.name}` is not declared in {module.path}")
        return self.evaluate_binding(binding, prop_types)

    def _namespace(self, binding, prop_types):
        target = self.graph.resolve_specifier(binding.module_path, binding.source)
        if target is None:
            return Unevaluatable(reason=f"namespace of external module '{binding.source}'")
        module = self.graph.load(target)
        key = (module.path, "*", prop_types)
        if key in self._active:
            return Unevaluatable(reason=f"cyclic namespace {module.path}")
        self._active.add(key)
        try:
            properties = [
                ObjectProperty(name=name, value=self.evaluate_binding(export, prop_types),
                               description=self.description(export))
                for name, export in module.exports.items()
            ]
        finally:
            self._active.discard(key)
        return ObjectDescriptor(properties=properties)

    def _eval_ObjectExpression(self, node, module, prop_types):
        merged = {}
        for prop in node.properties:
            if isinstance(prop, nodes.SpreadElement):
                spread = self._spread(prop.argument, module, prop_types)
                if isinstance(spread, ObjectDescriptor):
                    merge_properties(merged, spread.properties)
                else:
                    debug_log(f"  skipping spread at {module.path}:{prop.line}: {getattr(spread, 'reason', spread.kind)}")
                continue

            name = nodes.key_name(prop.key, prop.computed)
            if name is None:
                key = self.evaluate(prop.key, module)
                if not isinstance(key, LiteralDescriptor) or key.value is None:
                    continue
                name = str(key.value)

            required = False
            if prop_types:
                value, required = self.prop_type(prop.value, module)
            else:
                value = self.evaluate(prop.value, module)
            merged[name] = ObjectProperty(name=name, value=value, required=required,
                                          description=module.leading_comment(prop))
        return ObjectDescriptor(properties=list(merged.values()))

    def _spread(self, argument, module, prop_types):
        if prop_types:
            # `...OtherComponent` inside propTypes merges its propTypes
            declaration = self.declaration(argument, module)
            if declaration is not None:
                static = self.static_member(declaration, "propTypes")
                if static is not None:
                    return self.evaluate(static[0], static[1], prop_types=True)
        return self.evaluate(argument, module, prop_types)

    def _eval_function(self, node, module, prop_types):
        if isinstance(node, nodes.ArrowFunctionExpression) and node.expression:
            returned = self.evaluate(node.body, module, prop_types)
        else:
            returns = list(nodes.iter_returns(node.body))
            if len(returns) == 1 and returns[0].argument is not None:
                returned = self.evaluate(returns[0].argument, module, prop_types)
            else:
                returned = None
        if isinstance(returned, Unevaluatable):
            returned = None
        return FunctionDescriptor(parameter_names=parameter_names(node.params), return_descriptor=returned)

    _eval_FunctionExpression = _eval_function
    _eval_FunctionDeclaration = _eval_function
    _eval_ArrowFunctionExpression = _eval_function

    def _eval_class(self, node, module, prop_types):
        for item in node.body:
            if (isinstance(item, nodes.ClassMethod) and not item.static
                    and nodes.key_name(item.key, item.computed) == "constructor"):
                return FunctionDescriptor(parameter_names=parameter_names(item.value.params))
        return FunctionDescriptor()

    _eval_ClassExpression = _eval_class
    _eval_ClassDeclaration = _eval_class

    def _eval_CallExpression(self, node, module, prop_types):
        source = require_source(node)
        if source is not None:
            binding = ImportedDefaultBinding(module_path=module.path, name=f"require('{source}')",
                                             source=source, require=True)
            return self.evaluate_binding(binding, prop_types)

        callee = self.evaluate(node.callee, module, prop_types)
        if isinstance(callee, FunctionDescriptor) and callee.return_descriptor is not None:
            return callee.return_descriptor
        return Unevaluatable(reason=f"call with unknown result at {module.path}:{node.line}")

    def _eval_MemberExpression(self, node, module, prop_types):
        name = nodes.member_name(node)
        if name is None:
            key = self.evaluate(node.property, module)
            if not isinstance(key, LiteralDescriptor) or key.value is None:
                return Unevaluatable(reason="computed member access")
            name = str(key.value)

        declaration = self.declaration(node.object, module)
        if declaration is not None:
            static = self.static_member(declaration, name)
            if static is not None:
                return self.evaluate(static[0], static[1], prop_types)

        target = self.evaluate(node.object, module, prop_types)
        if isinstance(target, ObjectDescriptor):
            prop = target.get(name)
            if prop is not None:
                return prop.value
            return Unevaluatable(reason=f"no property `{name}`")
        return Unevaluatable(reason=f"member `{name}` of a non-object")

    # --- PropTypes ---

    def prop_type(self, node, module):
        """
        Classify a PropTypes declaration.

        Returns:
            (descriptor, required): ``required`` is set by ``.isRequired``
        """
        node = nodes.unwrap_parens(node)
        if isinstance(node, nodes.MemberExpression) and nodes.member_name(node) == "isRequired":
            descriptor, _ = self.prop_type(node.object, module)
            return descriptor, True

        kind = self._prop_type_kind(node, module)
        if kind is not None:
            return PrimitiveTypeDescriptor(name=kind), False

        if isinstance(node, nodes.CallExpression):
            kind = self._prop_type_kind(node.callee, module)
            if kind is not None:
                return self._prop_type_call(kind, node, module), False

        if node.type in nodes.FUNCTION_TYPES:
            return PrimitiveTypeDescriptor(name="custom", raw=module.source_text(node)), False

        key = (module.path, id(node), "prop_type")
        if key in self._active:
            return Unevaluatable(reason="cyclic prop type"), False
        self._active.add(key)
        try:
            return self._indirect_prop_type(node, module)
        finally:
            self._active.discard(key)

    def _indirect_prop_type(self, node, module):
        # a name holding a type: `const sizeType = PropTypes.oneOf([...])`
        if isinstance(node, nodes.Identifier):
            declaration = self.declaration(node, module)
            if declaration is not None:
                return self.prop_type(declaration.node, self.graph.load(declaration.module_path))
        # a member of another propTypes object: `Button.propTypes.size`
        if isinstance(node, nodes.MemberExpression):
            target = self.evaluate(node.object, module, prop_types=True)
            name = nodes.member_name(node)
            if isinstance(target, ObjectDescriptor) and name is not None:
                prop = target.get(name)
                if prop is not None:
                    return prop.value, prop.required
        return Unevaluatable(reason=f"not a prop type at {module.path}:{node.line}"), False

    def _is_prop_types_root(self, node, module):
        node = nodes.unwrap_parens(node)
        if isinstance(node, nodes.MemberExpression):
            # React.PropTypes
            return isinstance(node.object, nodes.Identifier) and nodes.member_name(node) == "PropTypes"
        if not isinstance(node, nodes.Identifier):
            return False
        binding = self.resolver.resolve_import(module, node.name)
        if binding is None:
            return node.name == "PropTypes" and node.name not in module.scope
        if isinstance(binding, (ImportedDefaultBinding, NamespaceBinding)):
            return binding.source in self.prop_types_modules
        return binding.imported == "PropTypes" or (
            binding.source in self.prop_types_modules and binding.imported == "default")

    def _prop_type_kind(self, node, module):
        """PropTypes kind named by an expression (`PropTypes.bool`, imported `bool`)."""
        node = nodes.unwrap_parens(node)
        if isinstance(node, nodes.MemberExpression) and not node.computed:
            if self._is_prop_types_root(node.object, module):
                return nodes.member_name(node)
            return None
        if isinstance(node, nodes.Identifier):
            binding = self.resolver.resolve_import(module, node.name)
            if (isinstance(binding, ImportedNamedBinding) and binding.source in self.prop_types_modules
                    and binding.imported not in ("default", "PropTypes")):
                return binding.imported
        return None

    def _type_or_custom(self, node, module):
        descriptor, _ = self.prop_type(node, module)
        if isinstance(descriptor, PrimitiveTypeDescriptor):
            return descriptor
        return PrimitiveTypeDescriptor(name="custom", raw=module.source_text(node))

    def _literal_array(self, node, module):
        """The array literal an expression is or names, with its module."""
        node = nodes.unwrap_parens(node)
        if isinstance(node, nodes.ArrayExpression):
            return node, module
        if isinstance(node, nodes.Identifier):
            declaration = self.declaration(node, module)
            if declaration is not None and isinstance(nodes.unwrap_parens(declaration.node), nodes.ArrayExpression):
                return nodes.unwrap_parens(declaration.node), self.graph.load(declaration.module_path)
        return None, module

    def _prop_type_call(self, kind, call, module):
        argument = nodes.unwrap_parens(call.arguments[0]) if call.arguments else None
        if kind not in PROP_TYPES_CALLS or argument is None:
            return PrimitiveTypeDescriptor(name="custom", raw=module.source_text(call))

        if kind == "oneOf":
            array, array_module = self._literal_array(argument, module)
            if array is None:
                return PrimitiveTypeDescriptor(name="enum", raw=module.source_text(argument), computed=True)
            values = [
                LiteralDescriptor(value=getattr(element, "value", None),
                                  raw=array_module.source_text(element),
                                  computed=not is_literal(element))
                for element in array.elements
            ]
            return PrimitiveTypeDescriptor(name="enum", enum_values=values)

        if kind in ("shape", "exact"):
            shape = self.evaluate(argument, module, prop_types=True)
            if isinstance(shape, ObjectDescriptor):
                return PrimitiveTypeDescriptor(name=kind, shape_of=shape)
            return PrimitiveTypeDescriptor(name=kind, raw=module.source_text(argument), computed=True)

        if kind in ("arrayOf", "objectOf"):
            return PrimitiveTypeDescriptor(name=kind, of=self._type_or_custom(argument, module))

        if kind == "oneOfType":
            array, array_module = self._literal_array(argument, module)
            if array is None:
                return PrimitiveTypeDescriptor(name="union", raw=module.source_text(argument), computed=True)
            return PrimitiveTypeDescriptor(
                name="union", union_of=[self._type_or_custom(element, array_module) for element in array.elements])

        # instanceOf
        return PrimitiveTypeDescriptor(name="instanceOf", raw=module.source_text(argument))
