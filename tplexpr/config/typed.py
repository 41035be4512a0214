from __future__ import annotations

import dataclasses
import typing as t
from dataclasses import is_dataclass, fields

from ..errors import TplUserError


class ConfigError(TplUserError):
    """Ошибка загрузки конфигурации с указанием пути поля."""
    def __init__(self, message: str, path: tuple[str, ...] = ()):
        self.path = path
        prefix = f"{'.'.join(path)}: " if path else ""
        super().__init__(prefix + message)


_T = t.TypeVar("_T")


def build_typed(cls: type[_T], data: t.Any) -> _T:
    """
    Построить плоский dataclass по словарю, приводя значения полей
    согласно type hints (Any, bool, str, int, Dict[K, V]).
    """
    if not is_dataclass(cls):
        raise TypeError(f"build_typed expects a dataclass, got {cls!r}")
    try:
        return t.cast(_T, _build_dataclass(cls, data))
    except ConfigError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigError(f"failed to build {cls.__name__}: {e}") from e


def _build_dataclass(cls: type, data: t.Any):
    if not isinstance(data, dict):
        raise ConfigError(f"expected mapping for {cls.__name__}, got {type(data).__name__}")
    # строгая проверка лишних ключей
    allowed = {f.name for f in fields(cls)}
    extras = set(data.keys()) - allowed
    if extras:
        raise ConfigError(f"unexpected keys: {sorted(extras, key=str)!r}")

    # аннотации могут быть строками (from __future__ import annotations)
    hints = t.get_type_hints(cls)
    kwargs = {}
    for f in fields(cls):
        f_path = (f.name,)
        if f.name in data:
            kwargs[f.name] = coerce(data[f.name], hints.get(f.name, t.Any), f_path)
        elif f.default is not dataclasses.MISSING:
            kwargs[f.name] = f.default
        elif f.default_factory is not dataclasses.MISSING:
            kwargs[f.name] = f.default_factory()
        else:
            raise ConfigError("required field missing", f_path)
    return cls(**kwargs)


def coerce(value: t.Any, hint: t.Any, path: tuple[str, ...]) -> t.Any:
    """Нормализация значения согласно типу-подсказке."""
    # Any — пропускаем
    if hint is t.Any:
        return value

    # bool не приводим мягко: bool("false") == True
    if hint is bool:
        if isinstance(value, bool):
            return value
        raise ConfigError(f"expected bool, got {type(value).__name__}", path)

    # Примитивы
    if hint in (str, int):
        if isinstance(value, hint) and not isinstance(value, bool):
            return value
        # YAML обычно даёт правильные типы, но попробуем мягкое приведение
        try:
            return hint(value)
        except (TypeError, ValueError):
            raise ConfigError(f"expected {hint.__name__}, got {type(value).__name__}", path)

    # Словари
    if t.get_origin(hint) is dict:
        k_t, v_t = t.get_args(hint) or (t.Any, t.Any)
        if not isinstance(value, dict):
            raise ConfigError(f"expected dict, got {type(value).__name__}", path)
        out = {}
        for k, v in value.items():
            kk = coerce(k, k_t, (*path, "<key>"))
            out[kk] = coerce(v, v_t, (*path, str(kk)))
        return out

    raise TypeError(f"unsupported field type {hint!r}")


__all__ = ["ConfigError", "build_typed", "coerce"]
