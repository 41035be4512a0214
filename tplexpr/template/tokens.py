"""
Лексические типы шаблонизатора.

Определяет типы токенов и сам токен с позиционной информацией.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TokenType(enum.Enum):
    """Типы токенов в шаблоне."""

    # Текстовый контент вне плейсхолдеров
    TEXT = "TEXT"

    # Разделители плейсхолдеров
    OPEN_TEMPLATE = "OPEN_TEMPLATE"          # {{
    CLOSE_TEMPLATE = "CLOSE_TEMPLATE"        # }}

    # Операторы
    PIPE = "PIPE"                            # |
    QUESTION = "QUESTION"                    # ?
    COLON = "COLON"                          # :
    OR = "OR"                                # or

    # Значения
    STRING = "STRING"
    IDENTIFIER = "IDENTIFIER"

    # Служебный токен парсера (лексер его не выдаёт)
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """
    Токен с позиционной информацией для точной диагностики ошибок.
    """
    type: TokenType
    value: str
    position: int        # Позиция в исходном тексте
    line: int = 1        # Номер строки (начиная с 1)
    column: int = 1      # Номер колонки (начиная с 1)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


__all__ = ["TokenType", "Token"]
