"""
Tests for the TemplateEngine facade.
"""

import threading

import pytest

import tplexpr
from tplexpr import EngineConfig, EvaluationError, ParseError, TemplateEngine
from tplexpr.template.nodes import TemplateNode, TextNode
from tplexpr.template.parser import MAX_DEPTH_LIMIT


class TestBasicRendering:

    def test_plain_text(self, engine):
        """Test plain text"""
        assert engine.render("Hello World") == "Hello World"

    def test_empty_template(self, engine):
        """Test empty template"""
        assert engine.render("") == ""

    def test_variable_substitution(self, engine):
        """Test variable substitution"""
        assert engine.render("Hello {{ name }}!", {"name": "John"}) == "Hello John!"

    def test_missing_variables(self, engine):
        """Test missing variables"""
        assert engine.render("Hello {{ name }}!") == "Hello !"

    def test_templates_at_start_and_end(self, engine):
        """Test placeholders at start and end"""
        result = engine.render("{{ start }} middle {{ end }}", {"start": "BEGIN", "end": "END"})
        assert result == "BEGIN middle END"

    def test_consecutive_templates(self, engine):
        """Test consecutive placeholders"""
        assert engine.render("{{ a }}{{ b }}", {"a": "Hello", "b": "World"}) == "HelloWorld"

    def test_non_string_values(self, engine):
        """Test non-string values"""
        assert engine.render("{{ number }}", {"number": 42}) == "42"

    def test_passthrough_without_placeholders(self, engine):
        """Test that text without placeholders is unchanged"""
        for text in ["", "no templates", "a } b }} c", "{ single }", "multi\nline\n"]:
            assert engine.render(text, {"a": "x"}) == text

    def test_or_fallback_use_case(self, engine):
        """Test or fallback for a page title"""
        template = "{{ category_meta_title or category }} - Example.com"

        assert engine.render(template, {
            "category_meta_title": "Custom Meta Title",
            "category": "Videos",
        }) == "Custom Meta Title - Example.com"
        assert engine.render(template, {"category_meta_title": "", "category": "Videos"}) == "Videos - Example.com"
        assert engine.render(template, {"category": "Videos"}) == "Videos - Example.com"


class TestErrors:

    def test_unknown_filter(self, engine):
        """Test unknown filter"""
        with pytest.raises(EvaluationError, match="Unknown filter: unknown"):
            engine.render("{{ name | unknown }}", {"name": "john"})

    def test_parse_errors(self, engine):
        """Test parse errors"""
        with pytest.raises(ParseError, match="CLOSE_TEMPLATE"):
            engine.compile("{{ name")
        with pytest.raises(ParseError, match="COLON"):
            engine.compile("{{ cond ? 'a' }}")
        with pytest.raises(ParseError, match="Unexpected token"):
            engine.compile("{{ 123 }}")

    def test_long_or_chain(self, engine):
        """Test that a long or chain is a ParseError, not a RecursionError"""
        source = "{{ " + " or ".join(["a"] * 800) + " or 'z' }}"
        with pytest.raises(ParseError, match="max depth"):
            engine.render(source)

    def test_long_pipe_chain(self, engine):
        """Test that a long filter chain is a ParseError, not a RecursionError"""
        with pytest.raises(ParseError, match="max depth"):
            engine.render("{{ x" + " | upper" * 800 + " }}", {"x": "a"})

    def test_moderate_chains_render(self, engine):
        """Test that chains within the depth limit still render"""
        assert engine.render("{{ " + " or ".join(["a"] * 30) + " or 'z' }}") == "z"
        assert engine.render("{{ x" + " | upper" * 30 + " }}", {"x": "a"}) == "A"

    def test_failed_compile_not_cached(self, engine):
        """Test that a failed compile is not cached"""
        with pytest.raises(ParseError):
            engine.compile("{{ broken")
        assert engine.cache_size == 0

    def test_errors_are_user_errors(self):
        """Test that template errors are user errors"""
        assert issubclass(ParseError, tplexpr.TplUserError)
        assert issubclass(EvaluationError, tplexpr.TplUserError)


class TestCompileCache:

    def test_same_source_returns_same_ast(self, engine):
        """Test that the same source returns the cached AST"""
        first = engine.compile("Hello {{ name }}")
        second = engine.compile("Hello {{ name }}")

        assert first is second
        assert engine.cache_size == 1

    def test_compiled_ast_is_immutable(self, engine):
        """Test that the cached AST cannot be changed through compile()"""
        ast = engine.compile("Hello {{ name }}")

        assert isinstance(ast, tuple)
        with pytest.raises(AttributeError):
            ast.clear()  # type: ignore[attr-defined]
        assert engine.render("Hello {{ name }}", {"name": "Ann"}) == "Hello Ann"

    def test_cache_skips_lexer(self, engine, monkeypatch):
        """Test that a cache hit skips the lexer"""
        engine.compile("{{ a | upper }}")

        def fail(_text):
            raise AssertionError("lexer must not run on cache hit")

        monkeypatch.setattr("tplexpr.engine.tokenize_template", fail)
        assert engine.render("{{ a | upper }}", {"a": "x"}) == "X"

    def test_cache_key_is_exact_source(self, engine):
        """Test that the cache key is the exact source"""
        a = engine.compile("{{a}}")
        b = engine.compile("{{ a }}")

        assert a == b
        assert a is not b
        assert engine.cache_size == 2

    def test_clear_cache(self, engine):
        """Test clear cache"""
        first = engine.compile("{{ a }}")
        engine.clear_cache()

        assert engine.cache_size == 0
        assert engine.compile("{{ a }}") is not first

    def test_cache_disabled(self):
        """Test disabled cache"""
        engine = TemplateEngine(EngineConfig(cache=False))
        first = engine.compile("{{ a }}")

        assert engine.compile("{{ a }}") is not first
        assert engine.cache_size == 0

    def test_compile_structure(self, engine):
        """Test compiled AST structure"""
        ast = engine.compile("x {{a}}{{b}}")

        assert isinstance(ast[0], TextNode)
        assert [type(n) for n in ast[1:]] == [TemplateNode, TemplateNode]


class TestFilters:

    def test_list_filters(self, engine):
        """Test filter list"""
        filters = engine.get_filters()

        assert filters[:4] == ["lower", "upper", "capitalize", "includes"]

    def test_add_filter(self, engine):
        """Test adding a filter"""
        engine.add_filter("reverse", lambda v: str(v)[::-1])

        assert engine.render("{{ name | reverse }}", {"name": "abc"}) == "cba"
        assert engine.get_filters()[-1] == "reverse"

    def test_add_filter_with_multiple_arguments(self, engine):
        """Test filter with multiple arguments"""
        engine.add_filter("replace", lambda v, s, r: str(v).replace(str(s), str(r)))

        result = engine.render("{{ text | replace 'world' 'universe' }}", {"text": "hello world"})
        assert result == "hello universe"

    def test_overwrite_builtin(self, engine):
        """Test overwriting a built-in filter"""
        engine.add_filter("upper", lambda v: "overridden")

        assert engine.render("{{ x | upper }}", {"x": "a"}) == "overridden"
        assert engine.get_filters().count("upper") == 1

    def test_engines_do_not_share_filters(self):
        """Test that engines do not share filters"""
        a = TemplateEngine()
        b = TemplateEngine()
        a.add_filter("only_a", lambda v: v)

        assert "only_a" in a.get_filters()
        assert "only_a" not in b.get_filters()

    def test_filter_registered_after_compile(self, engine):
        """Test filter registered after compile"""
        ast = engine.compile("{{ x | late }}")
        engine.add_filter("late", lambda v: "late:" + str(v))

        assert engine.evaluate(ast, {"x": 1}) == "late:1"


class TestConfigVars:

    def test_default_vars(self):
        """Test default variables from config"""
        engine = TemplateEngine(EngineConfig(vars={"site": "Example", "name": "Anon"}))

        assert engine.render("{{ name }} @ {{ site }}") == "Anon @ Example"
        assert engine.render("{{ name }} @ {{ site }}", {"name": "Bob"}) == "Bob @ Example"

    def test_max_depth_from_config(self):
        """Test max depth from config"""
        engine = TemplateEngine(EngineConfig(max_depth=1))

        assert engine.render("{{ a }}", {"a": "ok"}) == "ok"
        with pytest.raises(ParseError, match="max depth"):
            engine.compile("{{ a ? b : c }}")

    def test_max_depth_above_limit_rejected(self):
        """Test that max_depth above the parser limit is a config error"""
        with pytest.raises(tplexpr.ConfigError, match="max_depth: must be between"):
            EngineConfig(max_depth=MAX_DEPTH_LIMIT + 1)


class TestModuleLevel:

    def test_render_function(self):
        """Test module-level render"""
        assert tplexpr.render("{{ a | upper }}", {"a": "x"}) == "X"

    def test_default_engine_is_shared(self):
        """Test that the default engine is shared"""
        assert tplexpr.get_default_engine() is tplexpr.get_default_engine()


class TestThreads:

    def test_concurrent_render_and_register(self, engine):
        """Test concurrent render and filter registration"""
        errors = []

        def worker(i):
            try:
                engine.add_filter(f"f{i}", lambda v, i=i: f"{v}{i}")
                for _ in range(50):
                    assert engine.render(f"{{{{ x | f{i} }}}}", {"x": "v"}) == f"v{i}"
            except Exception as e:  # pragma: no cover - reported below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert engine.cache_size == 8
