import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from tplexpr.config import CACHE_ENV
from tplexpr.engine import TemplateEngine

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # переменные окружения не должны влиять на юнит-тесты
    monkeypatch.delenv(CACHE_ENV, raising=False)
    monkeypatch.delenv("TPLEXPR_DEBUG", raising=False)


@pytest.fixture
def engine() -> TemplateEngine:
    return TemplateEngine()


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def run_cli(cwd: Path, *args: str, stdin: str | None = None) -> subprocess.CompletedProcess:
    env = os.environ.copy()
    env.pop(CACHE_ENV, None)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PROJECT_ROOT), env.get("PYTHONPATH")]))
    return subprocess.run(
        [sys.executable, "-m", "tplexpr.cli", *args],
        cwd=cwd, env=env, input=stdin, capture_output=True, text=True, encoding="utf-8"
    )


def jload(s: str):
    return json.loads(s)
