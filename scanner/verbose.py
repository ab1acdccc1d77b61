import sys

# Global verbose flag
_VERBOSE = False


def set_verbose(value):
    """Set the global verbose flag."""
    global _VERBOSE
    _VERBOSE = value


def is_verbose():
    return _VERBOSE


def debug_log(message):
    """Log a debug message to stderr if verbose mode is enabled."""
    if _VERBOSE:
        print(f"\033[94mDEBUG:\033[0m {message}", file=sys.stderr)


def warn_log(message):
    """Log a recoverable problem to stderr regardless of verbosity."""
    print(f"\033[93mWARNING:\033[0m {message}", file=sys.stderr)
