from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator


def load_env(path: Path | None = None) -> None:
    """
    Populate os.environ from dotenv files.

    ``.env`` at the project root is read first and never replaces variables
    that are already set. ``.env.local`` next to it may override values coming
    from ``.env`` but not variables exported by the shell.
    """
    shell_keys = set(os.environ)

    env_path = path or _project_env_path()
    if env_path.exists():
        for key, value in _iter_pairs(env_path):
            os.environ.setdefault(key, value)

    if path is not None:
        return

    local_path = env_path.with_name(".env.local")
    if local_path.exists():
        for key, value in _iter_pairs(local_path):
            if key not in shell_keys:
                os.environ[key] = value


def _iter_pairs(env_path: Path) -> Iterator[tuple[str, str]]:
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):]
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            yield key, _unquote(value.strip())


def _project_env_path() -> Path:
    return Path(__file__).resolve().parents[2] / ".env"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


__all__ = ["load_env"]
