"""Locates the puml2png YAML config, expands ${VAR} references, and validates it."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import Puml2PngConfig

PROJECT_CONFIG = "puml2png.yaml"
USER_CONFIG = Path(".puml2png") / "config.yaml"

_ENV_REF = re.compile(r"\$\{(\w+)\}")


def load_config(cli_path: str | None = None) -> Puml2PngConfig:
    """First non-empty config among CLI path, ./puml2png.yaml and ~/.puml2png/config.yaml.

    Falls back to built-in defaults. Raises ValueError for a missing CLI
    path or an unreadable/invalid file.
    """
    for path in _candidate_paths(cli_path):
        raw = _read_yaml(path)
        if raw is None:
            continue
        try:
            return Puml2PngConfig(**_expand_env_vars(raw))
        except (TypeError, ValidationError) as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
    return Puml2PngConfig()


def _candidate_paths(cli_path: str | None) -> list[Path]:
    if cli_path:
        if not Path(cli_path).exists():
            raise ValueError(f"Config file not found: {cli_path}")
        candidates = [Path(cli_path)]
    else:
        candidates = []
    candidates += [Path(PROJECT_CONFIG), Path.home() / USER_CONFIG]
    return [p for p in candidates if p.exists()]


def _read_yaml(path: Path) -> object:
    try:
        return yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e


def _expand_env_vars(obj: object) -> object:
    """Replace ${VAR} in string values (unset vars become ""), walking nested mappings."""
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), obj)
    return obj


# Default YAML template for `puml2png config init`
DEFAULT_CONFIG_TEMPLATE = """\
# puml2png.yaml

# PlantUML server
server:
  url: "http://www.plantuml.com/plantuml"   # or ${PLANTUML_SERVER}
  timeout: 10.0                # seconds per render request
  output_format: "png"         # png | svg

# Watch mode
watch:
  interval: 5.0                # seconds between directory scans
  recency_window: 10.0         # sources modified this recently are re-rendered
  source_extension: ".puml"
  use_fs_events: false         # wake early on file system events (watchdog)

# Logging
logging:
  level: "info"                # debug | info | warning | error
  format: "text"               # text | json
"""
