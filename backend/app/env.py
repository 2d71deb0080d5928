from __future__ import annotations

import os
from pathlib import Path

_ENV_LOADED = False


def _candidate_paths() -> list[Path]:
    here = Path(__file__).resolve()
    candidates: list[Path] = []
    explicit = (os.getenv("INCUBATOR_ENV_FILE") or "").strip()
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([Path.cwd() / ".env", here.parents[1] / ".env", here.parents[2] / ".env"])
    return list(dict.fromkeys(candidates))


def _parse_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#"):
        return None
    line = line.removeprefix("export ").strip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        value = value[1:-1]
    return key, value


def load_env() -> list[Path]:
    """Populate os.environ from .env files; variables already set win."""
    global _ENV_LOADED
    if _ENV_LOADED:
        return []
    _ENV_LOADED = True

    loaded: list[Path] = []
    for env_path in _candidate_paths():
        if not env_path.is_file():
            continue
        loaded.append(env_path)
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_line(raw_line)
            if parsed is None:
                continue
            key, value = parsed
            current = os.getenv(key)
            if current is None or not current.strip():
                os.environ[key] = value
    return loaded
