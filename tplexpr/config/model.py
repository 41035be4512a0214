from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from .typed import ConfigError
from ..template.parser import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT


@dataclass
class EngineConfig:
    """
    Настройки движка.

    max_depth — предел вложенности выражений (ветки ? :, звенья or и |), от 1 до MAX_DEPTH_LIMIT.
    cache     — кэшировать ли скомпилированные шаблоны по исходному тексту.
    vars      — значения переменных по умолчанию; контекст вызова их перекрывает.
    """
    max_depth: int = DEFAULT_MAX_DEPTH
    cache: bool = True
    vars: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not 1 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ConfigError(
                f"must be between 1 and {MAX_DEPTH_LIMIT}, got {self.max_depth}", ("max_depth",)
            )
