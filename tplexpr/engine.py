"""
Фасад шаблонизатора.

TemplateEngine связывает компиляцию (лексер + парсер), кэш
скомпилированных шаблонов и вычислитель. Реестр фильтров и кэш
принадлежат одному экземпляру движка и защищены одной блокировкой.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .config import EngineConfig, load_config
from .template.evaluator import TemplateEvaluator
from .template.filters import FilterFunction, FilterRegistry
from .template.lexer import tokenize_template
from .template.nodes import TopLevelNode
from .template.parser import TemplateParser

logger = logging.getLogger(__name__)


class TemplateEngine:
    """
    Движок шаблонов {{ ... }}.

    Пример:
        engine = TemplateEngine()
        engine.render("Hello {{ name | upper }}!", {"name": "world"})  # "Hello WORLD!"
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Args:
            config: Настройки движка (по умолчанию дефолты с учётом окружения)
        """
        self.config = config if config is not None else load_config(None)
        self.filters = FilterRegistry()
        self._evaluator = TemplateEvaluator(self.filters)
        self._cache: Dict[str, Tuple[TopLevelNode, ...]] = {}
        self._lock = threading.RLock()

    def compile(self, template: str) -> Tuple[TopLevelNode, ...]:
        """
        Компилирует шаблон в неизменяемый кортеж узлов.

        Ключ кэша - точный исходный текст; повторная компиляция
        той же строки возвращает тот же объект без повторного разбора.

        Raises:
            ParseError: При синтаксической ошибке
        """
        with self._lock:
            if self.config.cache:
                cached = self._cache.get(template)
                if cached is not None:
                    logger.debug(f"Template cache hit ({len(template)} chars)")
                    return cached

            parser = TemplateParser(max_depth=self.config.max_depth)
            ast = tuple(parser.parse(tokenize_template(template)))

            if self.config.cache:
                self._cache[template] = ast
                logger.debug(f"Template cached ({len(template)} chars, {len(ast)} nodes)")
            return ast

    def evaluate(self, ast: Sequence[TopLevelNode], context: Optional[Mapping[str, Any]] = None) -> str:
        """
        Рендерит скомпилированный шаблон.

        Значения из config.vars используются для переменных,
        отсутствующих в context.

        Raises:
            EvaluationError: При обращении к неизвестному фильтру
        """
        merged: Dict[str, Any] = dict(self.config.vars)
        if context:
            merged.update(context)
        with self._lock:
            return self._evaluator.evaluate(ast, merged)

    def render(self, template: str, context: Optional[Mapping[str, Any]] = None) -> str:
        """Компилирует (или берёт из кэша) и рендерит шаблон."""
        return self.evaluate(self.compile(template), context)

    def add_filter(self, name: str, fn: FilterFunction) -> None:
        """Регистрирует фильтр, заменяя существующий с тем же именем."""
        with self._lock:
            self.filters.register(name, fn)

    def get_filters(self) -> List[str]:
        """Имена фильтров в порядке регистрации (встроенные первыми)."""
        with self._lock:
            return self.filters.names()

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)


_default_engine: Optional[TemplateEngine] = None


def get_default_engine() -> TemplateEngine:
    """Движок по умолчанию для модульных функций (создаётся лениво)."""
    global _default_engine
    if _default_engine is None:
        _default_engine = TemplateEngine()
    return _default_engine


def render(template: str, context: Optional[Mapping[str, Any]] = None) -> str:
    """Рендерит шаблон движком по умолчанию."""
    return get_default_engine().render(template, context)


__all__ = ["TemplateEngine", "get_default_engine", "render"]
