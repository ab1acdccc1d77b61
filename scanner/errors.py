"""
Error handling utilities for the scanner.

Every failure of a top-level request is one of the exceptions below. They are
terminal: inputs are static source text, so nothing is retried.
"""


class AutodocsError(Exception):
    """Base class for scanner errors. ``str(error)`` is the plain message."""
    def __init__(self, message, path=None):
        self.message = message
        self.path = path
        super().__init__(message)


class MissingArgumentError(AutodocsError):
    """No entry path or source was supplied."""


class ModuleNotFoundError(AutodocsError):
    """
    The source provider could not produce text for a path.

    Shares its name with the builtin raised by failed Python imports, which it
    shadows wherever it is imported unqualified. It is not a subclass of the
    builtin, so import this module and use ``errors.ModuleNotFoundError``.
    """


class ParseError(AutodocsError):
    """Source text could not be parsed, with line numbers and hints."""
    def __init__(self, message, path=None, line_number=None, column=None, context=None, suggestion=None):
        self.line_number = line_number
        self.column = column
        self.context = context  # The offending line
        self.suggestion = suggestion
        super().__init__(message, path=path)
        self.args = (self._format_error(),)

    def _format_error(self):
        """Format the error message with location, context and suggestion."""
        lines = ["Parse error"]
        if self.path:
            lines.append(f" in {self.path}")
        if self.line_number:
            lines.append(f" at line {self.line_number}")
            if self.column:
                lines.append(f", column {self.column}")
        lines.append(":\n")

        lines.append(f"   {self.message}\n")

        if self.context:
            lines.append(f"   > {self.context}\n")

        if self.suggestion:
            lines.append(f"   hint: {self.suggestion}\n")

        return "".join(lines)


class UnresolvedExportError(AutodocsError):
    """A referenced export name does not exist in the target module."""
    def __init__(self, name, path):
        self.name = name
        super().__init__(f"ERROR: `{name}` is not exported by {path}", path=path)


class CyclicExportError(AutodocsError):
    """An export/import chain revisits a (module, name) pair or runs too deep."""
    def __init__(self, chain, reason="cyclic export chain"):
        self.chain = list(chain)
        hops = " -> ".join(f"{key[0]}#{key[1]}" for key in self.chain)
        super().__init__(f"ERROR: {reason}: {hops}", path=self.chain[0][0] if self.chain else None)


COMPONENT_PATH_HINT = (
    "ERROR: unable to resolve component path. Ensure exported story config has "
    "`componentPath` property with correct relative path to component implementation"
)


class UnresolvableComponentPathError(AutodocsError):
    """A story config has neither `componentPath` nor an imported `component`."""
    def __init__(self, path=None):
        super().__init__(COMPONENT_PATH_HINT, path=path)


def get_line_context(source_code, line_number):
    """Extract the line of code from source by line number (1-based)."""
    if not source_code or line_number is None:
        return None
    source_lines = source_code.split('\n')
    if 0 < line_number <= len(source_lines):
        return source_lines[line_number - 1].strip()
    return None


def detect_common_error_patterns(source_code):
    """Detect syntax the scanner does not support and return a hint."""
    if "<" in source_code and ":" in source_code and "interface " in source_code:
        return "TypeScript type syntax is not supported; point the scanner at compiled JavaScript"

    open_braces = source_code.count('{')
    close_braces = source_code.count('}')
    if open_braces != close_braces:
        return f"Unmatched braces: found {open_braces} '{{' but {close_braces} '}}'"

    open_parens = source_code.count('(')
    close_parens = source_code.count(')')
    if open_parens != close_parens:
        return f"Unmatched parentheses: found {open_parens} '(' but {close_parens} ')'"

    return None
