"""
Реестр фильтров шаблонизатора.

Фильтр - это функция fn(value, *args) -> value. Встроенные фильтры
работают со строковым представлением входного значения; includes
возвращает bool, который превращается в строку только на границе
плейсхолдера.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from ..values import to_string

logger = logging.getLogger(__name__)

FilterFunction = Callable[..., Any]


def _lower(value: Any) -> str:
    return to_string(value).lower()


def _upper(value: Any) -> str:
    return to_string(value).upper()


def _capitalize(value: Any) -> str:
    # Первая буква заглавная, остальные строчные
    text = to_string(value)
    return text[:1].upper() + text[1:].lower()


def _includes(value: Any, search: Any = None) -> bool:
    return to_string(search) in to_string(value)


# Встроенные фильтры (только для чтения; каждый реестр копирует их к себе)
DEFAULT_FILTERS: Mapping[str, FilterFunction] = MappingProxyType({
    "lower": _lower,
    "upper": _upper,
    "capitalize": _capitalize,
    "includes": _includes,
})


class FilterRegistry:
    """
    Реестр фильтров одного движка.

    Хранит фильтры в порядке регистрации; встроенные идут первыми.
    Повторная регистрация под тем же именем заменяет функцию,
    сохраняя исходное место имени в порядке.
    """

    def __init__(self, defaults: Optional[Mapping[str, FilterFunction]] = None):
        """
        Args:
            defaults: Начальный набор фильтров (по умолчанию DEFAULT_FILTERS)
        """
        source = DEFAULT_FILTERS if defaults is None else defaults
        self._filters: Dict[str, FilterFunction] = dict(source)
        logger.debug(f"FilterRegistry initialized with {len(self._filters)} filters")

    def register(self, name: str, fn: FilterFunction) -> None:
        """
        Регистрирует фильтр, заменяя существующий с тем же именем.

        Raises:
            TypeError: Если fn не вызываемый объект
        """
        if not callable(fn):
            raise TypeError(f"Filter '{name}' must be callable, got {type(fn).__name__}")
        if name in self._filters:
            logger.debug(f"Filter '{name}' overwrites existing filter")
        self._filters[name] = fn
        logger.debug(f"Registered filter: {name}")

    def resolve(self, name: str) -> Optional[FilterFunction]:
        """Возвращает фильтр по имени или None."""
        return self._filters.get(name)

    def names(self) -> List[str]:
        """Возвращает имена фильтров в порядке регистрации."""
        return list(self._filters)

    def __contains__(self, name: object) -> bool:
        return name in self._filters

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())


__all__ = ["FilterFunction", "FilterRegistry", "DEFAULT_FILTERS"]
