from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .model import EngineConfig
from .typed import ConfigError, build_typed

logger = logging.getLogger(__name__)

_yaml = YAML(typ="safe")

DEFAULT_CONFIG_FILE = "tplexpr.yaml"
CACHE_ENV = "TPLEXPR_CACHE"


def _norm_bool(x: Any) -> bool:
    if isinstance(x, bool):
        return x
    if x is None:
        return False
    s = str(x).strip().lower()
    return s not in {"0", "false", "no", "off", ""}


def _read_yaml(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as f:
            return _yaml.load(f)
    except YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e


def load_config(path: Optional[Path] = None) -> EngineConfig:
    """
    Загрузить настройки движка из YAML.

    • Если путь не задан или файла нет — вернуть дефолты.
    • Лишние ключи и неверные типы — ConfigError с путём поля.
    • Переменная окружения TPLEXPR_CACHE перекрывает ключ cache.
    """
    if path is None or not path.exists():
        cfg = EngineConfig()
    else:
        raw = _read_yaml(path) or {}
        cfg = build_typed(EngineConfig, raw)
        logger.debug(f"Loaded config from {path}")

    env = os.environ.get(CACHE_ENV, None)
    if env is not None:
        cfg.cache = _norm_bool(env)
        logger.debug(f"{CACHE_ENV}={env!r} overrides cache={cfg.cache}")

    return cfg


def load_context(path: Path) -> Dict[str, Any]:
    """
    Загрузить контекст рендеринга (YAML или JSON) из файла.

    Пустой файл даёт пустой контекст; корень обязан быть словарём.
    """
    if not path.exists():
        raise ConfigError(f"Context file not found: {path}")

    raw = _read_yaml(path)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Context file {path} must contain a mapping, got {type(raw).__name__}")
    return {str(k): v for k, v in raw.items()}


__all__ = ["load_config", "load_context", "DEFAULT_CONFIG_FILE", "CACHE_ENV"]
