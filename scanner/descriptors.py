"""
Descriptors: the canonical, language-neutral result of evaluating a value.

Descriptors are immutable pydantic models tagged by ``kind``. They form a
tree (objects hold properties, functions hold a return descriptor, PropTypes
hold nested types) and never reference syntax nodes.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class Descriptor(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: str


class ObjectProperty(BaseModel):
    model_config = ConfigDict(frozen=True)
    name: str
    value: Descriptor
    description: str = ""
    required: bool = False


class ObjectDescriptor(Descriptor):
    kind: str = "object"
    properties: List[ObjectProperty] = []

    def get(self, name):
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def names(self):
        return [prop.name for prop in self.properties]


class FunctionDescriptor(Descriptor):
    kind: str = "function"
    parameter_names: List[str] = []
    return_descriptor: Optional[Descriptor] = None


class PrimitiveTypeDescriptor(Descriptor):
    """
    A declared PropTypes type.

    ``name`` is the PropTypes kind (``string``, ``enum``, ``shape``...).
    Only the field matching the kind is set: ``enum_values`` for ``enum``,
    ``shape_of`` for ``shape``/``exact``, ``of`` for ``arrayOf``/``objectOf``,
    ``union_of`` for ``union``, ``raw`` for ``instanceOf``/``custom`` and for
    an enum whose values are not a literal array (then ``computed`` is set).
    """
    kind: str = "type"
    name: str
    enum_values: Optional[List["LiteralDescriptor"]] = None
    shape_of: Optional[ObjectDescriptor] = None
    of: Optional["PrimitiveTypeDescriptor"] = None
    union_of: Optional[List["PrimitiveTypeDescriptor"]] = None
    raw: Optional[str] = None
    computed: bool = False


class LiteralDescriptor(Descriptor):
    """A literal value; ``raw`` is its exact source text."""
    kind: str = "literal"
    value: Any = None
    raw: str
    computed: bool = False


class Unevaluatable(Descriptor):
    kind: str = "unevaluatable"
    reason: str


PrimitiveTypeDescriptor.model_rebuild()


def merge_properties(target, properties):
    """
    Merge properties into an ordered ``{name: ObjectProperty}`` dict.

    Later writes replace the value but keep the position of the first write.
    """
    for prop in properties:
        target[prop.name] = prop
    return target
