"""
Вычислитель шаблонов.

Проходит по AST шаблона и вычисляет его в контексте переменных,
вызывая фильтры из реестра движка.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, cast

from .filters import FilterRegistry
from .nodes import (
    FilterNode,
    Node,
    NodeType,
    OrNode,
    PipeNode,
    StringNode,
    TemplateNode,
    TernaryNode,
    TextNode,
    VariableNode,
)
from ..errors import TplUserError
from ..values import is_truthy, to_string


class EvaluationError(TplUserError):
    """Ошибка при вычислении шаблона."""

    def __init__(self, message: str, filter_name: Optional[str] = None):
        super().__init__(message)
        self.filter_name = filter_name


class TemplateEvaluator:
    """
    Вычислитель шаблонов.

    Принимает список узлов и контекст, возвращает отрендеренную строку.
    Реестр фильтров передаётся явно и читается во время вычисления.
    """

    def __init__(self, registry: FilterRegistry):
        """
        Args:
            registry: Реестр фильтров движка
        """
        self.registry = registry

    def evaluate(self, nodes: Sequence[Node], context: Optional[Mapping[str, Any]] = None) -> str:
        """
        Рендерит список узлов верхнего уровня.

        Args:
            nodes: Скомпилированный шаблон
            context: Значения переменных

        Returns:
            Результирующий текст (части склеиваются без разделителя)

        Raises:
            EvaluationError: При обращении к неизвестному фильтру
        """
        ctx: Mapping[str, Any] = context if context is not None else {}
        parts: List[str] = [to_string(self.evaluate_expression(node, ctx)) for node in nodes]
        return "".join(parts)

    def evaluate_expression(self, node: Node, context: Mapping[str, Any]) -> Any:
        """
        Вычисляет значение узла.

        Единственная точка диспетчеризации по типам узлов.

        Returns:
            Значение произвольного типа (строка для TEXT и TEMPLATE)

        Raises:
            EvaluationError: При неизвестном фильтре или типе узла
        """
        node_type = node.get_type()

        if node_type == NodeType.TEXT:
            return cast(TextNode, node).value
        elif node_type == NodeType.TEMPLATE:
            return to_string(self.evaluate_expression(cast(TemplateNode, node).expression, context))
        elif node_type == NodeType.VARIABLE:
            return self._evaluate_variable(cast(VariableNode, node), context)
        elif node_type == NodeType.STRING:
            return cast(StringNode, node).value
        elif node_type == NodeType.PIPE:
            return self._evaluate_pipe(cast(PipeNode, node), context)
        elif node_type == NodeType.TERNARY:
            return self._evaluate_ternary(cast(TernaryNode, node), context)
        elif node_type == NodeType.OR:
            return self._evaluate_or(cast(OrNode, node), context)
        else:
            raise EvaluationError(f"Unknown node type: {node_type}")

    def _evaluate_variable(self, node: VariableNode, context: Mapping[str, Any]) -> Any:
        """
        Значение переменной из контекста.

        Отсутствующая переменная (или None) даёт пустую строку, а не ошибку.
        """
        value = context.get(node.name)
        return "" if value is None else value

    def _evaluate_pipe(self, node: PipeNode, context: Mapping[str, Any]) -> Any:
        """
        Применяет фильтр к значению левого выражения: left | filter args...

        Результат фильтра возвращается как есть, без приведения к строке.
        """
        value = self.evaluate_expression(node.left, context)
        return self._apply_filter(node.filter, value, context)

    def _apply_filter(self, node: FilterNode, value: Any, context: Mapping[str, Any]) -> Any:
        args = [self.evaluate_expression(arg, context) for arg in node.args]

        fn = self.registry.resolve(node.name)
        if fn is None:
            raise EvaluationError(f"Unknown filter: {node.name}", filter_name=node.name)

        return fn(value, *args)

    def _evaluate_ternary(self, node: TernaryNode, context: Mapping[str, Any]) -> Any:
        """
        Вычисляет condition ? true_expr : false_expr

        Вычисляется ровно одна ветка.
        """
        if is_truthy(self.evaluate_expression(node.condition, context)):
            return self.evaluate_expression(node.true_expr, context)
        return self.evaluate_expression(node.false_expr, context)

    def _evaluate_or(self, node: OrNode, context: Mapping[str, Any]) -> Any:
        """
        Вычисляет left or right

        Использует короткое вычисление: right не вычисляется, если left истинен.
        """
        left = self.evaluate_expression(node.left, context)
        if is_truthy(left):
            return left
        return self.evaluate_expression(node.right, context)


__all__ = ["EvaluationError", "TemplateEvaluator"]
