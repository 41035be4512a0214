"""
tplexpr — шаблонизатор выражений {{ ... }}.

Поддерживает переменные, строковые литералы, цепочки фильтров,
тернарный оператор и запасные значения через or.
"""

from __future__ import annotations

from .config import ConfigError, EngineConfig, load_config
from .engine import TemplateEngine, get_default_engine, render
from .errors import TplUserError
from .template import EvaluationError, ParseError

__all__ = [
    "TemplateEngine",
    "EngineConfig",
    "load_config",
    "render",
    "get_default_engine",
    "TplUserError",
    "ParseError",
    "EvaluationError",
    "ConfigError",
]
