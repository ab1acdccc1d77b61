"""
Read-only views over evaluated exports:
- metadata: react-docgen style component metadata
- path_finder: component path of a story config
- shape: object/function shape of testkit drivers
"""

from .metadata import parse_metadata
from .path_finder import find_component_path
from .shape import describe_exports

__all__ = [
    'parse_metadata',
    'find_component_path',
    'describe_exports',
]
