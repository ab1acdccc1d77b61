"""
Entry points of the scanner.

Each call builds its own ModuleGraph, so nothing is cached between calls
except the compiled grammar.
"""
import os

from scanner.config import load_config
from scanner.errors import MissingArgumentError
from scanner.evaluator import Evaluator
from scanner.graph import ModuleGraph
from scanner.projections import describe_exports, find_component_path, parse_metadata
from scanner.verbose import debug_log, set_verbose  # noqa: F401

ENTRY_MODULE = "__entry__.js"


def _graph(provider, config):
    return ModuleGraph(provider=provider, config=config or load_config())


def _entry(graph, source, base_dir):
    """Register source text as a virtual module and return its path."""
    path = os.path.join(os.path.abspath(base_dir or os.getcwd()), ENTRY_MODULE)
    graph.add_source(path, source)
    return path


def metadata_parser(path=None, provider=None, config=None):
    """
    Component metadata of the module at ``path``.

    Returns:
        dict with ``description``, ``methods`` and, when declared,
        ``displayName`` and ``props``

    Raises:
        MissingArgumentError: if ``path`` is empty
    """
    if not path:
        raise MissingArgumentError("ERROR: Missing required `path` argument")
    debug_log(f"Parsing metadata: {path}")
    graph = _graph(provider, config)
    return parse_metadata(graph, path, Evaluator(graph))


def path_finder(source=None, provider=None, config=None, base_dir=None):
    """
    Component path declared by a story config given as source text.

    Raises:
        MissingArgumentError: if ``source`` is empty
        UnresolvableComponentPathError: if the config names no component
    """
    if not source:
        raise MissingArgumentError("ERROR: Missing required `source` argument")
    debug_log("Finding component path")
    graph = _graph(provider, config)
    return find_component_path(graph, _entry(graph, source, base_dir))


def get_export(path=None, source=None, base_dir=None, provider=None, config=None):
    """
    Shape of a module's default export (testkit drivers).

    The module is either read from ``path`` or given as ``source`` text, in
    which case relative imports resolve against ``base_dir`` (default: cwd).
    """
    if not path and not source:
        raise MissingArgumentError("ERROR: Missing required `source` argument")
    graph = _graph(provider, config)
    if source:
        path = _entry(graph, source, base_dir)
    debug_log(f"Describing exports: {path}")
    return describe_exports(graph, path)
