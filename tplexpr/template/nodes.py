"""
AST-узлы шаблонизатора.

Скомпилированный шаблон - это упорядоченный список узлов верхнего уровня
(TextNode и TemplateNode). Выражения внутри плейсхолдеров представлены
закрытым набором неизменяемых узлов; каждый узел сообщает свой NodeType,
по которому вычислитель выполняет диспетчеризацию в одном месте.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Tuple, Union


class NodeType(Enum):
    """Типы узлов AST."""
    TEXT = "TEXT"
    TEMPLATE = "TEMPLATE"
    VARIABLE = "VARIABLE"
    STRING = "STRING"
    FILTER = "FILTER"
    PIPE = "PIPE"
    TERNARY = "TERNARY"
    OR = "OR"


@dataclass(frozen=True)
class Node(ABC):
    """Базовый абстрактный класс для всех узлов AST."""

    @abstractmethod
    def get_type(self) -> NodeType:
        """Возвращает тип узла."""
        pass

    def __str__(self) -> str:
        """Представление узла в синтаксисе шаблона."""
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        pass


@dataclass(frozen=True)
class TextNode(Node):
    """
    Обычный текстовый контент вне плейсхолдеров.

    Выводится в результат как есть.
    """
    value: str

    def get_type(self) -> NodeType:
        return NodeType.TEXT

    def _to_string(self) -> str:
        return self.value


@dataclass(frozen=True)
class VariableNode(Node):
    """Ссылка на переменную контекста."""
    name: str

    def get_type(self) -> NodeType:
        return NodeType.VARIABLE

    def _to_string(self) -> str:
        return self.name


@dataclass(frozen=True)
class StringNode(Node):
    """Строковый литерал в одинарных или двойных кавычках."""
    value: str

    def get_type(self) -> NodeType:
        return NodeType.STRING

    def _to_string(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"


@dataclass(frozen=True)
class FilterNode(Node):
    """
    Вызов фильтра: name arg1 arg2 ...

    Аргументы - первичные выражения (переменные или строки),
    вычисляются до вызова фильтра.
    """
    name: str
    args: Tuple[Expression, ...] = ()

    def get_type(self) -> NodeType:
        return NodeType.FILTER

    def _to_string(self) -> str:
        return " ".join([self.name, *(str(arg) for arg in self.args)])


@dataclass(frozen=True)
class PipeNode(Node):
    """
    Применение фильтра к значению левого выражения: left | filter

    Цепочки левоассоциативны: a | f | g == (a | f) | g.
    """
    left: Expression
    filter: FilterNode

    def get_type(self) -> NodeType:
        return NodeType.PIPE

    def _to_string(self) -> str:
        return f"{self.left} | {self.filter}"


@dataclass(frozen=True)
class TernaryNode(Node):
    """
    Условное выражение: condition ? true_expr : false_expr
    """
    condition: Expression
    true_expr: Expression
    false_expr: Expression

    def get_type(self) -> NodeType:
        return NodeType.TERNARY

    def _to_string(self) -> str:
        return f"{self.condition} ? {self.true_expr} : {self.false_expr}"


@dataclass(frozen=True)
class OrNode(Node):
    """
    Запасное значение: left or right

    Возвращает левый операнд, если он истинен, иначе правый.
    Цепочки левоассоциативны: a or b or c == (a or b) or c.
    """
    left: Expression
    right: Expression

    def get_type(self) -> NodeType:
        return NodeType.OR

    def _to_string(self) -> str:
        return f"{self.left} or {self.right}"


@dataclass(frozen=True)
class TemplateNode(Node):
    """Плейсхолдер {{ expression }}."""
    expression: Expression

    def get_type(self) -> NodeType:
        return NodeType.TEMPLATE

    def _to_string(self) -> str:
        return f"{{{{ {self.expression} }}}}"


# Объединенные типы
Expression = Union[VariableNode, StringNode, PipeNode, TernaryNode, OrNode]
TopLevelNode = Union[TextNode, TemplateNode]


def node_to_dict(node: Node) -> Dict[str, Any]:
    """
    Сериализует узел (рекурсивно) в JSON-совместимый словарь.

    Ключ "type" содержит значение NodeType, остальные ключи - поля узла.
    """
    result: Dict[str, Any] = {"type": node.get_type().value}
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            result[f.name] = node_to_dict(value)
        elif isinstance(value, tuple):
            result[f.name] = [node_to_dict(item) for item in value]
        else:
            result[f.name] = value
    return result


__all__ = [
    "NodeType",
    "Node",
    "TextNode",
    "TemplateNode",
    "VariableNode",
    "StringNode",
    "FilterNode",
    "PipeNode",
    "TernaryNode",
    "OrNode",
    "Expression",
    "TopLevelNode",
    "node_to_dict",
]
