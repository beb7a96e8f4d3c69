"""Tests for argument quoting and joining."""

import bashlex
import pytest

from relaunch.core.quoting import (
    DoubleQuoteStyle,
    SingleQuoteStyle,
    bash_join,
    bash_quote,
    get_style,
    join_args,
    quote_args,
)
from relaunch.core.text import NotTextError
from relaunch.core.tokenizer import split

WORD_LISTS = [
    [],
    ["plain"],
    ["two words", "x"],
    ["it's", "'", "''"],
    ['say "hi"', '"', "\"'\""],
    ["$HOME", "${HOME}", "`id`", "$(id)"],
    ["a\\b", "trailing\\", "\\", "\\'", '\\"'],
    ["", "x", ""],
    ["tab\there", "new\nline", "  padded  "],
    ["ünïcødé", "日本語", "emoji 🎉"],
    ["a;b", "c|d", "e>f", "g&h", "*", "?", "~", "#"],
]


class TestSingleQuoteStyle:
    def test_simple(self):
        assert quote_args(["hello world"], "single") == "'hello world'"

    def test_embedded_single_quote(self):
        assert quote_args(["it's"], "single") == "'it'\\''s'"

    def test_other_specials_untouched(self):
        assert quote_args(['$HOME "x" \\'], "single") == "'$HOME \"x\" \\'"

    def test_empty_argument(self):
        assert quote_args([""], "single") == "''"

    def test_always_quotes(self):
        assert quote_args(["ls", "-la"], "single") == "'ls' '-la'"


class TestDoubleQuoteStyle:
    def test_simple(self):
        assert quote_args(["hello world"], "double") == '"hello world"'

    def test_embedded_double_quote(self):
        assert quote_args(['say "hi"'], "double") == '"say "\\""hi"\\"""'

    def test_dollar_escaped(self):
        assert quote_args(["$HOME"], "double") == '""\\$"HOME"'

    def test_backtick_and_backslash_escaped(self):
        assert quote_args(["`a\\`"], "double") == '""\\`"a"\\\\""\\`""'

    def test_single_quote_untouched(self):
        assert quote_args(["it's"], "double") == '"it\'s"'

    def test_empty_argument(self):
        assert quote_args([""], "double") == '""'


class TestRoundTrip:
    """Quoting then tokenizing gives back the original words."""

    @pytest.mark.parametrize("words", WORD_LISTS)
    @pytest.mark.parametrize("style", ["single", "double"])
    def test_tokenize_inverts_quote(self, words, style):
        diagnostics = []
        assert split(quote_args(words, style), diagnostics) == words
        assert diagnostics == []

    @pytest.mark.parametrize(
        "words",
        [["hello world"], ["a|b", "c>d"], ["x;y", "a&&b"]],
    )
    def test_bash_parses_single_quoted(self, words):
        """A bash parser sees one plain word per argument, no operators."""
        nodes = bashlex.parse("echo " + quote_args(words, "single"))
        assert len(nodes) == 1
        assert nodes[0].kind == "command"
        assert [p.word for p in nodes[0].parts if p.kind == "word"] == ["echo", *words]


class TestQuoteArgs:
    def test_empty_list(self):
        assert quote_args([]) == ""

    def test_default_style_is_single(self):
        assert quote_args(["a b"]) == "'a b'"

    def test_style_instance(self):
        assert quote_args(["a"], DoubleQuoteStyle()) == '"a"'

    def test_valid_bytes(self):
        assert quote_args([b"a b"]) == "'a b'"

    def test_undecodable_bytes(self):
        with pytest.raises(NotTextError):
            quote_args(["ok", b"\xff\xfe"])

    def test_lone_surrogate(self):
        """No partial output when any argument is not text."""
        with pytest.raises(NotTextError):
            quote_args(["ok", "bad\udcff"], "double")

    def test_generator_input(self):
        assert quote_args(w for w in ["a", "b"]) == "'a' 'b'"


class TestGetStyle:
    def test_known(self):
        assert isinstance(get_style("single"), SingleQuoteStyle)
        assert isinstance(get_style("double"), DoubleQuoteStyle)

    def test_unknown(self):
        with pytest.raises(ValueError, match="unknown quote style 'fancy'"):
            get_style("fancy")


class TestJoinArgs:
    def test_no_quoting(self):
        assert join_args(["a b", "it's", "c"]) == "a b it's c"

    def test_empty(self):
        assert join_args([]) == ""


class TestBashQuote:
    def test_empty_string(self):
        assert bash_quote("") == "''"

    def test_simple_word(self):
        assert bash_quote("hello") == "hello"

    def test_with_spaces(self):
        assert bash_quote("hello world") == "'hello world'"

    def test_with_single_quote(self):
        assert bash_quote("it's") == "'it'\\''s'"

    def test_safe_chars(self):
        assert bash_quote("foo-bar_baz.txt") == "foo-bar_baz.txt"
        assert bash_quote("/path/to/file") == "/path/to/file"
        assert bash_quote("key=value") == "key=value"

    def test_special_chars(self):
        assert bash_quote("$HOME") == "'$HOME'"
        assert bash_quote("a*b") == "'a*b'"
        assert bash_quote("a;b") == "'a;b'"


class TestBashJoin:
    def test_simple(self):
        assert bash_join(["echo", "hello"]) == "echo hello"

    def test_with_spaces(self):
        assert bash_join(["echo", "hello world"]) == "echo 'hello world'"

    def test_empty_arg(self):
        assert bash_join(["echo", ""]) == "echo ''"

    def test_empty_list(self):
        assert bash_join([]) == ""
