"""
Ядро шаблонизатора: лексер, парсер, AST, реестр фильтров и вычислитель.
"""

from __future__ import annotations

from .evaluator import EvaluationError, TemplateEvaluator
from .filters import DEFAULT_FILTERS, FilterFunction, FilterRegistry
from .lexer import TemplateLexer, tokenize_template
from .nodes import (
    Expression,
    FilterNode,
    Node,
    NodeType,
    OrNode,
    PipeNode,
    StringNode,
    TemplateNode,
    TernaryNode,
    TextNode,
    TopLevelNode,
    VariableNode,
    node_to_dict,
)
from .parser import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT, ParseError, TemplateParser, parse_template
from .tokens import Token, TokenType

__all__ = [
    "Token",
    "TokenType",
    "TemplateLexer",
    "tokenize_template",
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
    "ParseError",
    "TemplateParser",
    "parse_template",
    "DEFAULT_MAX_DEPTH",
    "MAX_DEPTH_LIMIT",
    "FilterFunction",
    "FilterRegistry",
    "DEFAULT_FILTERS",
    "EvaluationError",
    "TemplateEvaluator",
]
