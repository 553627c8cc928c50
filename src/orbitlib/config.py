from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


DEFAULT_ENDPOINT = "https://app.graphql-hive.com/graphql"
DEFAULT_TIMEOUT = 30.0


class ConfigError(RuntimeError):
    pass


@dataclass
class Profile:
    name: str
    endpoint: str = DEFAULT_ENDPOINT
    token: Optional[str] = None
    organization: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class Config:
    version: int = 1
    default_profile: Optional[str] = None
    profiles: Dict[str, Profile] = field(default_factory=dict)
    source_path: Optional[Path] = None

    def profile_names(self) -> List[str]:
        """Profile names in file order, with the default profile first."""
        names = list(self.profiles)
        if self.default_profile in self.profiles:
            names.remove(self.default_profile)
            names.insert(0, self.default_profile)
        return names

    def get_profile(self, name: Optional[str] = None) -> Profile:
        name = name or self.default_profile
        if not name:
            raise ConfigError("No profile specified and no default_profile set in config")
        prof = self.profiles.get(name)
        if prof is None:
            raise ConfigError(f"Profile not found: {name}")
        return prof

    def to_json(self) -> str:
        def _default(o: Any):
            if isinstance(o, Path):
                return str(o)
            if hasattr(o, "__dict__"):
                # Never echo credentials
                return {k: ("***" if k == "token" and v else v) for k, v in o.__dict__.items()}
            return str(o)

        return json.dumps(self, default=_default, indent=2, sort_keys=True)


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        # Expand ${VAR} style
        return os.path.expandvars(value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def _as_profile(name: str, raw: Dict[str, Any]) -> Profile:
    timeout = raw.get("timeout")
    try:
        timeout = float(timeout) if timeout is not None else DEFAULT_TIMEOUT
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Profile '{name}': invalid timeout {timeout!r}") from e

    return Profile(
        name=name,
        endpoint=str(raw.get("endpoint") or DEFAULT_ENDPOINT).strip(),
        token=raw.get("token") or None,
        organization=raw.get("organization") or None,
        timeout=timeout,
    )


def resolve_config_path() -> Path:
    # Highest priority: explicit override
    override = os.environ.get("ORBIT_CONFIG")
    if override:
        p = Path(override).expanduser()
        if p.is_file():
            return p
        raise ConfigError(f"ORBIT_CONFIG path not found: {p}")

    # XDG base dirs
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", "~/.config")).expanduser()
    candidates = [xdg_home / "orbit" / "config.yaml"]

    xdg_dirs = os.environ.get("XDG_CONFIG_DIRS", "/etc/xdg")
    for d in xdg_dirs.split(":"):
        if d:
            candidates.append(Path(d) / "orbit" / "config.yaml")

    for c in candidates:
        if c.is_file():
            return c

    raise ConfigError(
        "No config file found. Set ORBIT_CONFIG or create ~/.config/orbit/config.yaml"
    )


def load_config(path: Optional[Path] = None) -> Config:
    cfg_path = path or resolve_config_path()
    try:
        data = yaml.safe_load(cfg_path.read_text()) or {}
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read config {cfg_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {cfg_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config in {cfg_path}: expected a mapping")

    data = _expand_env(data)
    profiles_raw = data.get("profiles") or {}
    if not isinstance(profiles_raw, dict):
        raise ConfigError(f"Invalid config in {cfg_path}: 'profiles' must be a mapping")

    profiles: Dict[str, Profile] = {}
    for name, raw in profiles_raw.items():
        if raw is not None and not isinstance(raw, dict):
            raise ConfigError(f"Invalid config in {cfg_path}: profile '{name}' must be a mapping")
        profiles[str(name)] = _as_profile(str(name), raw or {})

    try:
        version = int(data.get("version", 1))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config in {cfg_path}: bad version {data.get('version')!r}") from e

    default_profile = data.get("default_profile")
    cfg = Config(
        version=version,
        default_profile=str(default_profile) if default_profile is not None else None,
        profiles=profiles,
        source_path=cfg_path,
    )
    return cfg
