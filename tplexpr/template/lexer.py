"""
Лексический анализатор шаблонов.

Токенизирует исходный текст шаблона, разбивая его на последовательность
токенов для последующего синтаксического анализа. Лексер работает в двух
режимах: вне плейсхолдера (всё до следующего {{ - это текст) и внутри
плейсхолдера {{ ... }} (операторы, строки, идентификаторы).

Лексер никогда не выбрасывает исключений: незакрытые строки поглощаются
до конца ввода, неизвестные символы внутри плейсхолдера пропускаются.
Все синтаксические ошибки обнаруживает парсер.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from .tokens import Token, TokenType

logger = logging.getLogger(__name__)


class TemplateLexer:
    """
    Лексический анализатор шаблонов.

    Переключается между текстовым режимом и режимом выражения
    на разделителях {{ и }}, которые всегда выдаются отдельными токенами.
    """

    OPEN = "{{"
    CLOSE = "}}"

    # Односимвольные операторы внутри плейсхолдера
    _OPERATORS = {
        "|": TokenType.PIPE,
        "?": TokenType.QUESTION,
        ":": TokenType.COLON,
    }

    # Ключевые слова
    _KEYWORDS = {
        "or": TokenType.OR,
    }

    _WHITESPACE = re.compile(r"\s+")
    _IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

    # Строка в одинарных или двойных кавычках; \ экранирует любой символ.
    # Незакрытая строка (в том числе с висящим \) тянется до конца текста.
    _STRINGS = {
        "'": re.compile(r"'((?:\\.|[^'\\])*)(?:'|\\?\Z)", re.DOTALL),
        '"': re.compile(r'"((?:\\.|[^"\\])*)(?:"|\\?\Z)', re.DOTALL),
    }
    _ESCAPE = re.compile(r"\\(.)", re.DOTALL)

    def __init__(self, text: str):
        self.text = text
        self.position = 0
        self.line = 1
        self.column = 1
        self.length = len(text)
        self.inside_template = False

    def tokenize(self) -> List[Token]:
        """
        Токенизирует весь исходный текст и возвращает список токенов.

        Returns:
            Список токенов (без завершающего EOF)
        """
        tokens: List[Token] = []

        while self.position < self.length:
            if self.inside_template:
                token = self._next_expression_token()
            else:
                token = self._next_text_token()

            if token is not None:
                tokens.append(token)

        logger.debug(f"Tokenized text of length {self.length} into {len(tokens)} tokens")
        return tokens

    def _next_text_token(self) -> Token:
        """Извлекает токен в текстовом режиме: {{ или текст до следующего {{."""
        start_pos, start_line, start_column = self.position, self.line, self.column

        if self.text.startswith(self.OPEN, self.position):
            self._advance(len(self.OPEN))
            self.inside_template = True
            return Token(TokenType.OPEN_TEMPLATE, self.OPEN, start_pos, start_line, start_column)

        text_end = self.text.find(self.OPEN, self.position)
        if text_end == -1:
            text_end = self.length

        value = self.text[self.position:text_end]
        self._advance(len(value))
        return Token(TokenType.TEXT, value, start_pos, start_line, start_column)

    def _next_expression_token(self) -> Optional[Token]:
        """
        Извлекает токен внутри плейсхолдера.

        Returns:
            Токен или None, если символы были пропущены (пробелы, мусор)
        """
        start_pos, start_line, start_column = self.position, self.line, self.column

        # Разделители проверяются первыми
        if self.text.startswith(self.OPEN, self.position):
            self._advance(len(self.OPEN))
            return Token(TokenType.OPEN_TEMPLATE, self.OPEN, start_pos, start_line, start_column)

        if self.text.startswith(self.CLOSE, self.position):
            self._advance(len(self.CLOSE))
            self.inside_template = False
            return Token(TokenType.CLOSE_TEMPLATE, self.CLOSE, start_pos, start_line, start_column)

        # Пропускаем пробелы
        match = self._WHITESPACE.match(self.text, self.position)
        if match:
            self._advance(len(match.group(0)))
            return None

        char = self.text[self.position]

        operator_type = self._OPERATORS.get(char)
        if operator_type is not None:
            self._advance(1)
            return Token(operator_type, char, start_pos, start_line, start_column)

        string_pattern = self._STRINGS.get(char)
        if string_pattern is not None:
            match = string_pattern.match(self.text, self.position)
            # Шаблон строки сопоставляется всегда, начиная с кавычки
            assert match is not None
            self._advance(len(match.group(0)))
            value = self._ESCAPE.sub(r"\1", match.group(1))
            return Token(TokenType.STRING, value, start_pos, start_line, start_column)

        match = self._IDENTIFIER.match(self.text, self.position)
        if match:
            value = match.group(0)
            self._advance(len(value))
            token_type = self._KEYWORDS.get(value, TokenType.IDENTIFIER)
            return Token(token_type, value, start_pos, start_line, start_column)

        # Неизвестный символ внутри плейсхолдера молча пропускается
        logger.debug(f"Skipping unexpected character {char!r} at {start_line}:{start_column}")
        self._advance(1)
        return None

    def _advance(self, count: int) -> None:
        """
        Перемещает позицию на указанное количество символов,
        обновляя номера строк и колонок.
        """
        for _ in range(count):
            if self.position < self.length:
                if self.text[self.position] == "\n":
                    self.line += 1
                    self.column = 1
                else:
                    self.column += 1
                self.position += 1


def tokenize_template(text: str) -> List[Token]:
    """
    Удобная функция для токенизации шаблона.

    Args:
        text: Исходный текст шаблона

    Returns:
        Список токенов
    """
    return TemplateLexer(text).tokenize()


__all__ = ["TemplateLexer", "tokenize_template"]
