"""Prompt loading helpers for the rewrite provider."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"

VERIFY_CONTENT = "Ping"


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def default_system_prompt() -> str:
    return _load_template("rewrite")


def verify_system_prompt() -> str:
    return _load_template("verify")
