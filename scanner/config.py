"""Scanner configuration."""
import json
import os
from typing import List

from pydantic import BaseModel, ValidationError

from scanner.verbose import debug_log, warn_log

CONFIG_PATHS = ["autodocs.json", os.path.expanduser("~/.autodocs/config.json")]


class ScanConfig(BaseModel):
    """Settings shared by the module graph, resolver and evaluator."""
    entry_file_name: str = "index.js"
    extensions: List[str] = [".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx"]
    max_hops: int = 32
    prop_types_modules: List[str] = ["prop-types"]


def load_config(paths=None):
    """Load the first config file found, falling back to defaults."""
    for p in paths or CONFIG_PATHS:
        if not os.path.exists(p):
            continue
        try:
            with open(p, "r") as f:
                data = json.load(f)
            debug_log(f"Loaded config from {p}")
            return ScanConfig(**data)
        except (OSError, ValueError, TypeError, ValidationError) as e:
            warn_log(f"Ignoring invalid config {p}: {e}")
            return ScanConfig()
    return ScanConfig()


def write_default_config(path="autodocs.json"):
    """Write the default configuration, refusing to overwrite an existing file."""
    if os.path.exists(path):
        raise FileExistsError(f"{path} already exists")
    with open(path, "w") as f:
        json.dump(ScanConfig().model_dump(), f, indent=2)
        f.write("\n")
    return path
