"""Behavior of the BBCode converter on well-formed and malformed markup."""

import string
import unittest

from bbhtml import Converter, ConverterOpts, convert


class TestEscaping(unittest.TestCase):
    def test_reserved_characters_become_entities(self):
        assert convert("<") == "&lt;"
        assert convert(">") == "&gt;"
        assert convert("&") == "&amp;"
        assert convert("a < b > c & d") == "a &lt; b &gt; c &amp; d"

    def test_plain_text_passes_through(self):
        text = string.ascii_letters + string.digits + " \t\n.,;:!?'\"(){}/\\-_=+*"
        assert convert(text) == text

    def test_unicode_passes_through(self):
        text = "naïve café ✓ \U0001f600 日本語"
        assert convert(text) == text

    def test_existing_entities_are_escaped_again(self):
        assert convert("&amp;") == "&amp;amp;"

    def test_idempotent_on_plain_output(self):
        """Output without brackets or reserved characters converts to itself."""
        text = "Nothing special here, just words and 123 numbers."
        once = convert(text)
        assert convert(once) == once == text

    def test_empty_input(self):
        assert convert("") == ""
        assert convert(None) == ""


class TestSimpleTags(unittest.TestCase):
    def test_balanced_round_trip(self):
        assert convert("[b]x[/b]") == "<b>x</b>"

    def test_every_simple_tag(self):
        for tag in ("b", "i", "u", "s", "sup", "sub", "blockquote", "ol", "ul", "table"):
            with self.subTest(tag=tag):
                assert convert(f"[{tag}]x[/{tag}]") == f"<{tag}>x</{tag}>"

    def test_tag_names_are_case_insensitive(self):
        assert convert("[B]x[/B]") == "<b>x</b>"
        assert convert("[Sup]x[/sUP]") == "<sup>x</sup>"

    def test_nested_tags(self):
        assert convert("[b][i][u]x[/u][/i][/b]") == "<b><i><u>x</u></i></b>"

    def test_text_between_tags_is_escaped(self):
        assert convert("[b]1 < 2[/b]") == "<b>1 &lt; 2</b>"


class TestAliases(unittest.TestCase):
    def test_quote_renders_blockquote(self):
        assert convert("[quote]q[/quote]") == "<blockquote>q</blockquote>"

    def test_code_renders_pre(self):
        assert convert("[code]x[/code]") == "<pre>x</pre>"

    def test_star_renders_list_item(self):
        assert convert("[ul][*]a[/*][/ul]") == "<ul><li>a</li></ul>"

    def test_alias_closes_canonical_tag(self):
        assert convert("[quote]q[/blockquote]") == "<blockquote>q</blockquote>"
        assert convert("[blockquote]q[/QUOTE]") == "<blockquote>q</blockquote>"

    def test_tags_inside_pre_are_interpreted(self):
        assert convert("[code][b]x[/b][/code]") == "<pre><b>x</b></pre>"


class TestClosingTags(unittest.TestCase):
    def test_closing_outer_closes_inner_first(self):
        assert convert("[b][i]x[/b]") == "<b><i>x</i></b>"

    def test_closing_deep_outer(self):
        assert convert("[b][i][u]x[/b]y") == "<b><i><u>x</u></i></b>y"

    def test_unmatched_close_is_literal(self):
        assert convert("[/b]") == "[/b]"

    def test_unmatched_close_leaves_stack_alone(self):
        assert convert("[b]x[/i]y[/b]") == "<b>x[/i]y</b>"

    def test_empty_close_is_literal(self):
        assert convert("[/]") == "[/]"

    def test_close_only_first_match(self):
        assert convert("[b][b]x[/b]y[/b]") == "<b><b>x</b>y</b>"

    def test_end_of_input_closes_innermost_first(self):
        assert convert("[b]x") == "<b>x</b>"
        assert convert("[b][i]x") == "<b><i>x</i></b>"


class TestEscapedBracket(unittest.TestCase):
    def test_double_bracket_is_literal(self):
        assert convert("[[b]") == "[b]"

    def test_double_bracket_opens_nothing(self):
        assert convert("[[b]x[/b]") == "[b]x[/b]"

    def test_lone_brackets(self):
        assert convert("[[") == "["
        assert convert("]") == "]"
        assert convert("a [ b") == "a [ b"


class TestStructuralRules(unittest.TestCase):
    def test_list_item_outside_list_is_literal(self):
        assert convert("[li]x[/li]") == "[li]x[/li]"

    def test_list_item_inside_list(self):
        assert convert("[ul][li]x[/li][/ul]") == "<ul><li>x</li></ul>"
        assert convert("[ol][li]x[/li][/ol]") == "<ol><li>x</li></ol>"

    def test_list_item_deeper_inside_list(self):
        assert convert("[ul][b][*]x[/ul]") == "<ul><b><li>x</li></b></ul>"

    def test_row_needs_table(self):
        assert convert("[tr]x[/tr]") == "[tr]x[/tr]"
        assert convert("[table][tr]x[/tr][/table]") == "<table><tr>x</tr></table>"

    def test_cell_needs_row_and_table(self):
        assert convert("[td]x[/td]") == "[td]x[/td]"
        assert convert("[table][td]x[/td][/table]") == "<table>[td]x[/td]</table>"
        assert (
            convert("[table][tr][td]a[/td][th]b[/th][/tr][/table]")
            == "<table><tr><td>a</td><th>b</th></tr></table>"
        )

    def test_cell_with_row_outside_table(self):
        """A row below its table is the only accepted order."""
        converter = Converter()
        converter.stack = ["tr"]
        assert not converter._in_row()
        converter.stack = ["tr", "table"]
        assert not converter._in_row()
        converter.stack = ["table", "tr"]
        assert converter._in_row()

    def test_rejected_tag_keeps_original_case(self):
        assert convert("[LI]x") == "[LI]x"


class TestDegradation(unittest.TestCase):
    def test_unknown_tag_is_literal(self):
        assert convert("[foo]x[/foo]") == "[foo]x[/foo]"

    def test_argument_tags_are_literal(self):
        assert convert("[url]x[/url]") == "[url]x[/url]"
        assert convert("[img]x.png[/img]") == "[img]x.png[/img]"
        assert convert("[url=http://a.b]x[/url]") == "[url=http://a.b]x[/url]"
        assert convert("[color=red]x[/color]") == "[color=red]x[/color]"
        assert convert("[size=3]x[/size]") == "[size=3]x[/size]"
        assert convert("[font Arial]x[/font]") == "[font Arial]x[/font]"

    def test_argument_form_of_plain_tag_is_literal(self):
        assert convert("[b=1]x") == "[b=1]x"
        assert convert("[b x]y") == "[b x]y"

    def test_illegal_character_in_name(self):
        assert convert("[b1]x") == "[b1]x"
        assert convert("[b-i]") == "[b-i]"

    def test_illegal_character_in_closing_name(self):
        assert convert("[b]x[/b ]") == "<b>x[/b ]</b>"

    def test_illegal_first_character(self):
        assert convert("[1]") == "[1]"
        assert convert("[ b]") == "[ b]"
        assert convert("[]") == "[]"

    def test_rollback_does_not_resume_tag(self):
        """The character after an aborted name is plain text, even a bracket."""
        assert convert("[x[b]y") == "[x[b]y"

    def test_reserved_character_in_rollback_is_escaped(self):
        assert convert("[<") == "[&lt;"
        assert convert("[<script>]") == "[&lt;script&gt;]"
        assert convert("[b<i>]") == "[b&lt;i&gt;]"
        assert convert("[/b&]") == "[/b&amp;]"

    def test_star_only_starts_a_name(self):
        assert convert("[ul][b*]x[/ul]") == "<ul>[b*]x</ul>"


class TestPartialTagAtEnd(unittest.TestCase):
    def test_partial_tags_are_flushed_by_default(self):
        assert convert("x[") == "x["
        assert convert("x[quo") == "x[quo"
        assert convert("x[/quo") == "x[/quo"
        assert convert("[b]x[/") == "<b>x[/</b>"

    def test_partial_tags_can_be_dropped(self):
        opts = ConverterOpts(flush_partial_tags=False)
        assert convert("x[", opts) == "x"
        assert convert("x[quo", opts) == "x"
        assert convert("[b]x[/b", opts) == "<b>x</b>"


class TestOptions(unittest.TestCase):
    def test_bom_passes_through_by_default(self):
        assert convert("\ufeffabc") == "\ufeffabc"
        assert convert("\ufeff[b]x[/b]") == "\ufeff<b>x</b>"

    def test_bom_is_discarded_on_request(self):
        assert convert("\ufeff[b]x[/b]", discard_bom=True) == "<b>x</b>"
        assert convert("x\ufeff", discard_bom=True) == "x\ufeff"

    def test_opts_and_keywords_are_exclusive(self):
        with self.assertRaises(TypeError):
            convert("x", ConverterOpts(), strict=True)

    def test_opts_repr(self):
        assert "flush_partial_tags=True" in repr(ConverterOpts())

    def test_converter_is_reusable(self):
        converter = Converter()
        assert converter.run("[b]x") == "<b>x</b>"
        assert converter.run("[i]y") == "<i>y</i>"
        assert converter.stack == []

    def test_debug_logs_transitions(self):
        with self.assertLogs("bbhtml.converter", level="DEBUG") as logs:
            convert("[b]x[/b]", debug=True)
        assert any("opened <b>" in line for line in logs.output)
        assert any("closed <b>" in line for line in logs.output)


if __name__ == "__main__":
    unittest.main()
