from dataclasses import dataclass, fields
from functools import lru_cache

import yaml

from . import paths

JOURNAL_MODES = ("delete", "truncate", "persist", "memory", "wal", "off")


@dataclass(frozen=True)
class OpenOptions:
    """Settings applied when a connection is opened."""

    timeout: float = 5.0
    check_same_thread: bool = True
    foreign_keys: bool = False
    journal_mode: str | None = None


def config_file():
    """Return config file path in .litebind/"""
    return paths.config_file()


def clear_cache():
    load_config.cache_clear()


@lru_cache(maxsize=1)
def load_config() -> dict:
    """Load the config.yaml file, returning its content or an empty dict if not found."""
    path = config_file()
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def open_options(cfg: dict | None = None) -> OpenOptions:
    """Build OpenOptions from the `connection:` section of the config."""
    if cfg is None:
        cfg = load_config()
    section = cfg.get("connection") or {}
    if not isinstance(section, dict):
        raise ValueError("'connection' config section must be a mapping")

    known = {f.name for f in fields(OpenOptions)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"Unknown connection options: {', '.join(unknown)}")

    journal_mode = section.get("journal_mode")
    if journal_mode is not None:
        journal_mode = str(journal_mode).lower()
        if journal_mode not in JOURNAL_MODES:
            raise ValueError(f"Invalid journal_mode '{journal_mode}'")

    defaults = OpenOptions()
    return OpenOptions(
        timeout=float(section.get("timeout", defaults.timeout)),
        check_same_thread=bool(section.get("check_same_thread", defaults.check_same_thread)),
        foreign_keys=bool(section.get("foreign_keys", defaults.foreign_keys)),
        journal_mode=journal_mode,
    )
