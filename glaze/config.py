# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Project configuration (`glaze.json`).

Format (v0, JSON, every key optional):
{
  "format": "glaze-config",
  "version": 0,
  "outDir": "dist",
  "compact": false
}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from glaze.core.errors import ConfigError

CONFIG_FILENAME = "glaze.json"
CONFIG_FORMAT = "glaze-config"
CONFIG_VERSION = 0

_KNOWN_KEYS = {"format", "version", "outDir", "compact"}


@dataclass(frozen=True)
class GlazeConfig:
	out_dir: Optional[Path] = None
	compact: bool = False


def load_config(path: Path) -> GlazeConfig:
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except FileNotFoundError:
		raise ConfigError(f"{path}: config file not found") from None
	except json.JSONDecodeError as err:
		raise ConfigError(f"{path}: invalid JSON at line {err.lineno}, column {err.colno}: {err.msg}") from None
	if not isinstance(obj, dict):
		raise ConfigError(f"{path}: config must be a JSON object")

	unknown = sorted(set(obj) - _KNOWN_KEYS)
	if unknown:
		raise ConfigError(f"{path}: unknown key '{unknown[0]}'")
	if "format" in obj and obj["format"] != CONFIG_FORMAT:
		raise ConfigError(f"{path}: key 'format' must be '{CONFIG_FORMAT}'")
	# bool is an int subclass; `true` is not a version.
	if "version" in obj and (isinstance(obj["version"], bool) or obj["version"] != CONFIG_VERSION):
		raise ConfigError(f"{path}: unsupported config version (key 'version' must be {CONFIG_VERSION})")

	out_dir = obj.get("outDir")
	if out_dir is not None and not isinstance(out_dir, str):
		raise ConfigError(f"{path}: key 'outDir' must be a string")
	compact = obj.get("compact", False)
	if not isinstance(compact, bool):
		raise ConfigError(f"{path}: key 'compact' must be a boolean")

	base = path.parent
	return GlazeConfig(out_dir=(base / out_dir) if out_dir is not None else None, compact=compact)


def find_config(explicit: Optional[Path] = None, cwd: Optional[Path] = None) -> GlazeConfig:
	"""
	Resolve the configuration for a run.

	An explicit path must exist; otherwise `glaze.json` in `cwd` is used when
	present, and the defaults apply when it is not.
	"""
	if explicit is not None:
		return load_config(explicit)
	candidate = (cwd or Path.cwd()) / CONFIG_FILENAME
	if candidate.exists():
		return load_config(candidate)
	return GlazeConfig()


__all__ = ["GlazeConfig", "load_config", "find_config", "CONFIG_FILENAME"]
