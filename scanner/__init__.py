# autodocs-utils - static analysis of JavaScript component modules
"""
Core modules for the scanner:
- errors: Error taxonomy and parse diagnostics
- grammar: Lark grammar for the supported JavaScript subset
- syntax: Parse tree to typed node transformation
- graph: Module loading and binding collection
- resolver: Binding resolution across modules
- evaluator: Partial evaluation into descriptors
- projections: Metadata, component path and shape views
"""

from .errors import AutodocsError
from .config import ScanConfig, load_config
from .graph import ModuleGraph
from .resolver import BindingResolver
from .evaluator import Evaluator
from .source import FileSourceProvider, MemorySourceProvider
from .syntax import parse_source

__all__ = [
    'AutodocsError',
    'ScanConfig',
    'load_config',
    'ModuleGraph',
    'BindingResolver',
    'Evaluator',
    'FileSourceProvider',
    'MemorySourceProvider',
    'parse_source',
]
