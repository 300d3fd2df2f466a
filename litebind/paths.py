import os
from pathlib import Path


def dot_litebind() -> Path:
    override = os.environ.get("LITEBIND_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".litebind"


def config_file() -> Path:
    return dot_litebind() / "config.yaml"
