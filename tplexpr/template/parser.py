"""
Парсер шаблонов с рекурсивным спуском.

Строит список узлов верхнего уровня из последовательности токенов.
Соблюдает приоритеты операторов (от слабого к сильному):

template    → "{{" expression "}}"
expression  → ternary
ternary     → or_expr ( "?" expression ":" expression )?
or_expr     → pipeline ( "or" pipeline )*
pipeline    → primary ( "|" filter_call )*
filter_call → IDENTIFIER primary*
primary     → IDENTIFIER | STRING
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .lexer import tokenize_template
from .nodes import (
    Expression,
    FilterNode,
    OrNode,
    PipeNode,
    StringNode,
    TemplateNode,
    TernaryNode,
    TextNode,
    TopLevelNode,
    VariableNode,
)
from .tokens import Token, TokenType
from ..errors import TplUserError

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64
# Верхняя граница max_depth: разбор и вычисление рекурсивны и должны
# укладываться в стандартный лимит рекурсии интерпретатора
MAX_DEPTH_LIMIT = 200

# Токены, на которых заканчивается список аргументов фильтра
_FILTER_ARGS_STOP = frozenset({
    TokenType.PIPE,
    TokenType.QUESTION,
    TokenType.COLON,
    TokenType.OR,
    TokenType.CLOSE_TEMPLATE,
    TokenType.EOF,
})


class ParseError(TplUserError):
    """Ошибка синтаксического анализа шаблона."""

    def __init__(self, message: str, token: Token):
        super().__init__(f"{message} at {token.line}:{token.column}")
        self.message = message
        self.token = token
        self.position = token.position
        self.line = token.line
        self.column = token.column


class TemplateParser:
    """
    Парсер шаблонов с рекурсивным спуском.

    Работает по явному индексу в списке токенов. Глубина вложенности
    выражений (ветки тернарного оператора, звенья цепочек or и |)
    ограничена max_depth.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        if not 1 <= max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(f"max_depth must be between 1 and {MAX_DEPTH_LIMIT}, got {max_depth}")
        self.max_depth = max_depth
        self._tokens: List[Token] = []
        self._position = 0
        self._depth = 0

    def parse(self, tokens: List[Token]) -> List[TopLevelNode]:
        """
        Парсит список токенов в список узлов верхнего уровня.

        Args:
            tokens: Токены, полученные от лексера

        Returns:
            Упорядоченный список TextNode и TemplateNode

        Raises:
            ParseError: При синтаксической ошибке
        """
        self._tokens = list(tokens)
        self._position = 0
        self._depth = 0

        nodes: List[TopLevelNode] = []
        while not self._is_at_end():
            node = self._parse_node()
            if node is not None:
                nodes.append(node)

        logger.debug(f"Parsed {len(self._tokens)} tokens into {len(nodes)} nodes")
        return nodes

    def _parse_node(self) -> Optional[TopLevelNode]:
        """Парсит один узел верхнего уровня."""
        current = self._current_token()

        if current.type == TokenType.TEXT:
            self._advance()
            return TextNode(value=current.value)

        if current.type == TokenType.OPEN_TEMPLATE:
            return self._parse_template()

        # Посторонние токены на верхнем уровне пропускаются
        self._advance()
        return None

    def _parse_template(self) -> TemplateNode:
        """Парсит плейсхолдер: {{ expression }}"""
        self._expect(TokenType.OPEN_TEMPLATE)
        expression = self._parse_expression()
        self._expect(TokenType.CLOSE_TEMPLATE)
        return TemplateNode(expression=expression)

    def _parse_expression(self) -> Expression:
        """Парсит полное выражение с контролем глубины вложенности."""
        saved_depth = self._depth
        self._enter_nesting()
        try:
            return self._parse_ternary()
        finally:
            self._depth = saved_depth

    def _parse_ternary(self) -> Expression:
        """Парсит тернарный оператор (низший приоритет, правая ассоциативность)."""
        condition = self._parse_or()

        if not self._match(TokenType.QUESTION):
            return condition

        true_expr = self._parse_expression()
        self._expect(TokenType.COLON)
        false_expr = self._parse_expression()

        return TernaryNode(condition=condition, true_expr=true_expr, false_expr=false_expr)

    def _parse_or(self) -> Expression:
        """
        Парсит цепочку or (левая ассоциативность).

        Каждое звено цепочки углубляет дерево на один уровень,
        поэтому учитывается в max_depth наравне с ветками ? :.
        """
        saved_depth = self._depth
        try:
            left = self._parse_pipeline()

            while self._match(TokenType.OR):
                self._enter_nesting()
                level = self._depth
                right = self._parse_pipeline()
                self._depth = level
                left = OrNode(left=left, right=right)

            return left
        finally:
            self._depth = saved_depth

    def _parse_pipeline(self) -> Expression:
        """
        Парсит цепочку фильтров (левая ассоциативность).

        Глубина, набранная звеньями, не сбрасывается: левый операнд or
        лежит в дереве под всеми звеньями or.
        """
        left = self._parse_primary()

        while self._match(TokenType.PIPE):
            self._enter_nesting()
            left = PipeNode(left=left, filter=self._parse_filter())

        return left

    def _enter_nesting(self) -> None:
        """Углубляет вложенность на один уровень или выбрасывает ошибку."""
        if self._depth >= self.max_depth:
            raise ParseError(
                f"Expression nesting exceeds max depth {self.max_depth}",
                self._current_token(),
            )
        self._depth += 1

    def _parse_filter(self) -> FilterNode:
        """Парсит вызов фильтра: имя и ноль или более первичных аргументов."""
        name_token = self._expect(TokenType.IDENTIFIER)

        args: List[Expression] = []
        while self._current_token().type not in _FILTER_ARGS_STOP:
            args.append(self._parse_primary())

        return FilterNode(name=name_token.value, args=tuple(args))

    def _parse_primary(self) -> Expression:
        """Парсит первичное выражение: переменную или строковый литерал."""
        current = self._current_token()

        if current.type == TokenType.IDENTIFIER:
            self._advance()
            return VariableNode(name=current.value)

        if current.type == TokenType.STRING:
            self._advance()
            return StringNode(value=current.value)

        raise ParseError(f"Unexpected token: {current.type.value}", current)

    # Вспомогательные методы для работы с токенами

    def _current_token(self) -> Token:
        """Возвращает текущий токен без продвижения позиции."""
        if self._position >= len(self._tokens):
            # За концом списка - синтетический EOF сразу после последнего токена
            if self._tokens:
                last = self._tokens[-1]
                position = last.position + len(last.value)
                return Token(TokenType.EOF, "", position, last.line, last.column + len(last.value))
            return Token(TokenType.EOF, "", 0)
        return self._tokens[self._position]

    def _is_at_end(self) -> bool:
        return self._position >= len(self._tokens)

    def _advance(self) -> Token:
        """Продвигает позицию и возвращает потреблённый токен."""
        current = self._current_token()
        if not self._is_at_end():
            self._position += 1
        return current

    def _match(self, token_type: TokenType) -> bool:
        """Проверяет и потребляет токен указанного типа."""
        if self._current_token().type == token_type:
            self._advance()
            return True
        return False

    def _expect(self, token_type: TokenType) -> Token:
        """Потребляет токен указанного типа или выбрасывает ошибку."""
        current = self._current_token()
        if current.type != token_type:
            raise ParseError(f"Expected {token_type.value} but got {current.type.value}", current)
        return self._advance()


def parse_template(text: str, max_depth: int = DEFAULT_MAX_DEPTH) -> List[TopLevelNode]:
    """
    Удобная функция для разбора шаблона из строки.

    Args:
        text: Исходный текст шаблона
        max_depth: Максимальная глубина вложенности выражений

    Returns:
        Список узлов верхнего уровня

    Raises:
        ParseError: При синтаксической ошибке
    """
    return TemplateParser(max_depth=max_depth).parse(tokenize_template(text))


__all__ = ["ParseError", "TemplateParser", "parse_template", "DEFAULT_MAX_DEPTH", "MAX_DEPTH_LIMIT"]
