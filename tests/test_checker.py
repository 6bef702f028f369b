from hypothesis import given, settings
from hypothesis import strategies as st

from toyc.analex import tokenize
from toyc.checker import Verdict, check, format_verdict
from toyc.diagnostics import LEXICAL, SYNTAX

toyc_alphabet = list("intvoidfwhlebrkcu_019(){};,=+-*/%<>!&| \n\t")

sources = st.one_of(
    st.text(max_size=200),
    st.text(alphabet=toyc_alphabet, max_size=200),
)


class TestScenarios:
    def test_minimal_program_is_accepted(self):
        verdict = check("int main() { return 0; }")
        assert verdict.accepted
        assert len(verdict.diagnostics) == 0

    def test_bad_declaration_gives_one_diagnostic(self):
        verdict = check("int main() { int x = 1 (2; return x; }")
        assert not verdict.accepted
        assert verdict.diagnostics.lines() == [1]

    def test_break_inside_loop(self):
        assert check("void f() { while (1) { break; } }").accepted

    def test_break_outside_loop(self):
        verdict = check("void f() {\n  break;\n}\n")
        assert not verdict.accepted
        assert verdict.diagnostics.lines() == [2]

    def test_unterminated_comment(self):
        verdict = check("int f() { /* unterminated")
        assert not verdict.accepted
        assert verdict.diagnostics.lines() == [1]
        assert verdict.diagnostics.get(1).kind == LEXICAL
        assert verdict.diagnostics.get(1).message == "unterminated comment"

    def test_nothing_reported_past_unterminated_comment(self):
        verdict = check("int f() {\n  /* open\n  x;\n  y;\n}\n")
        assert not verdict.accepted
        assert verdict.diagnostics.lines() == [2]
        assert verdict.diagnostics.get(2).kind == LEXICAL

    def test_good_lines_before_unterminated_comment_stay_clean(self):
        verdict = check("int f() {\n  return 0;\n  /* open\n}\n")
        assert not verdict.accepted
        assert verdict.diagnostics.lines() == [3]

    def test_two_errors_on_different_lines(self):
        source = (
            "int main() {\n"
            "  int a = 0;\n"
            "  a = a + 1\n"
            "  int b = 2;\n"
            "  while (a < 10) {\n"
            "    a = a + 1;\n"
            "    b = f(a, b;\n"
            "  }\n"
            "  return 0;\n"
            "}\n"
        )
        verdict = check(source)
        assert not verdict.accepted
        assert verdict.diagnostics.lines() == [3, 7]

    def test_lexical_error_wins_over_syntax_error(self):
        verdict = check("int f() { int a = 1 & 2; return a; }")
        assert not verdict.accepted
        diag = verdict.diagnostics.get(1)
        assert diag.kind == LEXICAL
        assert diag.message == "expected '&&'"

    def test_syntax_kind(self):
        verdict = check("void f() { x; }")
        assert verdict.diagnostics.get(1).kind == SYNTAX

    def test_loop_check_option(self):
        assert check("void f() { break; }", strict_loops=False).accepted


class TestFormat:
    def test_accept(self):
        assert format_verdict(check("void f() { }")) == "accept"

    def test_reject_with_messages(self):
        verdict = check("void f() {\n  break;\n}\n")
        assert format_verdict(verdict) == "reject\nline 2: 'break' outside of a loop"

    def test_reject_lines_only(self):
        verdict = check("void f() {\n  x;\n  y = ;\n}\n")
        assert format_verdict(verdict, lines_only=True) == "reject\n2 3"

    def test_messages_sorted_by_line(self):
        verdict = check("void f() {\n  y = ;\n  break;\n  x;\n}\n")
        lines = format_verdict(verdict).splitlines()
        assert lines[0] == "reject"
        assert [line.split(':')[0] for line in lines[1:]] == ["line 2", "line 3", "line 4"]


class TestProperties:
    @given(sources)
    def test_tokenize_ends_with_one_eof(self, source):
        tokens, _ = tokenize(source)
        kinds = [tok.kind for tok in tokens]
        assert kinds[-1] == 'EOF'
        assert kinds.count('EOF') == 1

    @given(sources)
    @settings(max_examples=200)
    def test_check_is_total_and_one_per_line(self, source):
        verdict = check(source)
        lines = [diag.line for diag in verdict.diagnostics]
        assert len(lines) == len(set(lines))
        assert lines == sorted(lines)
        assert verdict.accepted == (len(lines) == 0)

    @given(sources)
    def test_check_is_idempotent(self, source):
        assert check(source) == check(source)


def test_verdict_fields():
    verdict = check("int main() { return 0; }")
    assert isinstance(verdict, Verdict)
    accepted, diagnostics = verdict
    assert accepted is True
