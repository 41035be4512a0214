from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import DEFAULT_CONFIG_FILE, load_config, load_context
from .engine import TemplateEngine
from .errors import TplUserError
from .template.lexer import tokenize_template
from .template.nodes import node_to_dict
from .version import tool_version

DEBUG_ENV = "TPLEXPR_DEBUG"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tplexpr",
        description="Expression templates: {{ name | upper or 'default' }}",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"файл настроек движка (по умолчанию ./{DEFAULT_CONFIG_FILE}, если есть)",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help=f"отладочный лог в stderr (то же, что {DEBUG_ENV}=1)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_template(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "template",
            metavar="TEXT|@FILE|-",
            help="текст шаблона: прямая строка, @file для чтения из файла или - для чтения из stdin",
        )

    sp_render = sub.add_parser("render", help="Отрендерить шаблон (текст в stdout)")
    add_template(sp_render)
    sp_render.add_argument(
        "--context",
        metavar="FILE",
        help="YAML/JSON-файл со значениями переменных",
    )
    sp_render.add_argument(
        "--var",
        action="append",
        metavar="NAME=VALUE",
        help="значение переменной (можно указать несколько; перекрывает --context)",
    )

    sp_ast = sub.add_parser("ast", help="AST шаблона (JSON)")
    add_template(sp_ast)

    sp_tokens = sub.add_parser("tokens", help="Токены шаблона (JSON)")
    add_template(sp_tokens)

    sub.add_parser("filters", help="Список доступных фильтров (JSON)")

    return p


def _setup_logging(debug: bool) -> None:
    if not (debug or os.environ.get(DEBUG_ENV)):
        return
    log = logging.getLogger("tplexpr")
    log.setLevel(logging.DEBUG)
    if not log.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        log.addHandler(h)


def _read_template(arg: str) -> str:
    """
    Читает шаблон из аргумента.

    Поддерживает три формата:
    - Прямая строка: "Hello {{ name }}"
    - Из файла: @path/to/template.txt
    - Из stdin: -

    В отличие от обычных аргументов, пробелы по краям сохраняются.
    """
    if arg == "-":
        return sys.stdin.read()

    if arg.startswith("@"):
        file_path = Path(arg[1:])
        if not file_path.exists():
            raise ValueError(f"Template file not found: {file_path}")
        try:
            return file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ValueError(f"Failed to read template file {file_path}: {e}")

    return arg


def _parse_vars(items: Optional[List[str]]) -> Dict[str, str]:
    """Парсит список 'name=value' в словарь."""
    result: Dict[str, str] = {}
    if not items:
        return result

    for item in items:
        if "=" not in item:
            raise ValueError(f"Invalid variable format '{item}'. Expected 'name=value'")
        name, value = item.split("=", 1)
        name = name.strip()
        if not name:
            raise ValueError(f"Invalid variable format '{item}'. Empty name")
        result[name] = value

    return result


def _make_engine(ns: argparse.Namespace) -> TemplateEngine:
    if ns.config:
        path = Path(ns.config)
        if not path.exists():
            raise ValueError(f"Config file not found: {path}")
    else:
        path = Path.cwd() / DEFAULT_CONFIG_FILE
    return TemplateEngine(load_config(path))


def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(bool(ns.debug))

    try:
        if ns.cmd == "render":
            engine = _make_engine(ns)
            context: Dict[str, Any] = {}
            if ns.context:
                context.update(load_context(Path(ns.context)))
            context.update(_parse_vars(ns.var))
            sys.stdout.write(engine.render(_read_template(ns.template), context))
            return 0

        if ns.cmd == "ast":
            engine = _make_engine(ns)
            ast = engine.compile(_read_template(ns.template))
            sys.stdout.write(_dumps([node_to_dict(node) for node in ast]))
            return 0

        if ns.cmd == "tokens":
            tokens = tokenize_template(_read_template(ns.template))
            data = [
                {"type": tok.type.value, "value": tok.value, "line": tok.line, "column": tok.column}
                for tok in tokens
            ]
            sys.stdout.write(_dumps(data))
            return 0

        if ns.cmd == "filters":
            engine = _make_engine(ns)
            sys.stdout.write(_dumps({"filters": engine.get_filters()}))
            return 0

    except TplUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except ValueError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
