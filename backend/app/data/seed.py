import json
from functools import lru_cache
from pathlib import Path
from typing import Any

SEED_PATH = Path(__file__).resolve().parent / "seed.json"


@lru_cache(maxsize=1)
def load_seed() -> dict[str, Any]:
    with SEED_PATH.open(encoding="utf-8-sig") as f:
        return json.load(f)


def get_users() -> list[dict[str, Any]]:
    return list(load_seed().get("users", []))


def get_startups() -> list[dict[str, Any]]:
    return list(load_seed().get("startups", []))
