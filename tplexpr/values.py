"""
Приведение динамических значений контекста.

Значения контекста - обычные объекты Python (str, bool, int, float, None
и всё остальное). Здесь определены два правила приведения, которые
использует вычислитель: истинность (для ? : и or) и строковое
представление (на границе плейсхолдера и во встроенных фильтрах).
"""

from __future__ import annotations

import math
from typing import Any


def is_truthy(value: Any) -> bool:
    """
    Истинность значения.

    Ложны только: None, False, пустая строка, числовой ноль и NaN.
    Все остальные значения (включая пустые списки и словари) истинны.
    """
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    return True


def to_string(value: Any) -> str:
    """
    Строковое представление значения.

    - None → ""
    - True/False → "true"/"false"
    - целые числа в десятичной записи, целочисленные float без ".0"
      (от 1e21 по модулю - экспоненциальная запись, "1e+21")
    - NaN → "NaN", бесконечности → "Infinity"/"-Infinity"
    - списки и кортежи → элементы через запятую
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return ",".join(to_string(item) for item in value)
    return str(value)


__all__ = ["is_truthy", "to_string"]
