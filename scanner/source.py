"""
Source providers.

A provider turns a module path into source text. It is the only place the
scanner performs I/O; everything downstream works on already-read text.
"""
import os
import stat

from scanner import errors
from scanner.verbose import debug_log


class FileSourceProvider:
    """Reads modules from the local file system."""

    def __init__(self, entry_file_name='index.js'):
        self.entry_file_name = entry_file_name

    def exists(self, path):
        return os.path.exists(path)

    def is_dir(self, path):
        return os.path.isdir(path)

    def read(self, path):
        """
        Read a module's source text.

        A directory is read through its entry file (``index.js`` by default).

        Raises:
            ModuleNotFoundError: if the path cannot be stat'ed or read
        """
        try:
            stats = os.lstat(path)
        except OSError:
            raise errors.ModuleNotFoundError(f"ERROR: Unable to get stats for {path}", path=path)

        if stat.S_ISDIR(stats.st_mode) or os.path.isdir(path):
            path = os.path.join(path, self.entry_file_name)

        debug_log(f"Reading {path}")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except OSError as e:
            raise errors.ModuleNotFoundError(f"ERROR: Unable to read {path}: {e.strerror}", path=path)


class MemorySourceProvider:
    """
    Serves modules from an in-memory ``{path: text}`` mapping.

    Paths are normalized to absolute paths. A path is a directory when some
    stored file lives beneath it. ``read_count`` counts every ``read`` call.
    """

    def __init__(self, files=None, entry_file_name='index.js'):
        self.entry_file_name = entry_file_name
        self.files = {os.path.abspath(path): text for path, text in (files or {}).items()}
        self.read_count = 0

    def add(self, path, text):
        self.files[os.path.abspath(path)] = text

    def exists(self, path):
        path = os.path.abspath(path)
        return path in self.files or self.is_dir(path)

    def is_dir(self, path):
        prefix = os.path.abspath(path).rstrip(os.sep) + os.sep
        return any(name.startswith(prefix) for name in self.files)

    def read(self, path):
        self.read_count += 1
        path = os.path.abspath(path)
        if path not in self.files:
            if not self.is_dir(path):
                raise errors.ModuleNotFoundError(f"ERROR: Unable to get stats for {path}", path=path)
            path = os.path.join(path, self.entry_file_name)
            if path not in self.files:
                raise errors.ModuleNotFoundError(f"ERROR: Unable to read {path}", path=path)
        debug_log(f"Reading {path} (memory)")
        return self.files[path]
