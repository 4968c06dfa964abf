"""Unit tests for the Go declaration extractor."""

from pathlib import Path

import pytest

from go_detector.core.declarations import extract_declarations, parse_declarations
from go_detector.core.patterns import CallKind, LiteralHint
from go_detector.errors import DeclarationError


class TestSyntaxErrors:
    """Tests for sources the Go grammar rejects."""

    def test_unterminated_string_raises(self) -> None:
        with pytest.raises(DeclarationError):
            parse_declarations('package p\n\nvar x = "open\n')

    def test_unterminated_comment_raises(self) -> None:
        with pytest.raises(DeclarationError):
            parse_declarations("package p\n\nvar x = 1 /* never closed\n")

    def test_unbalanced_brackets_raise(self) -> None:
        with pytest.raises(DeclarationError):
            parse_declarations("package main\n\nfunc main() {\n")

    def test_error_reports_line(self) -> None:
        with pytest.raises(DeclarationError, match="line"):
            parse_declarations("package main\n\nfunc main() {\n\tx := )\n}\n")


class TestParseDeclarations:
    """Tests for parse_declarations()."""

    def test_package_and_grouped_imports(self) -> None:
        decls = parse_declarations(
            'package foo\n\nimport (\n\t"fmt"\n\tstr "strings"\n\t_ "embed"\n)\nimport "os"\n'
        )
        assert decls.package == "foo"
        assert decls.imports == ("fmt", "strings", "embed", "os")

    def test_missing_package_clause(self) -> None:
        with pytest.raises(DeclarationError):
            parse_declarations("func main() {}\n")

    def test_byte_order_mark_is_ignored(self) -> None:
        assert parse_declarations("\ufeffpackage main\n").package == "main"

    def test_functions_and_methods(self) -> None:
        decls = parse_declarations(
            "package srv\n\n"
            "func (s *Server) Start() error { return nil }\n"
            "func helper(a, b int) (int, error) { return a + b, nil }\n"
            "func asm()\n"
        )
        start, helper, asm = decls.functions
        assert (start.name, start.exported, start.has_receiver) == ("Start", True, True)
        assert (helper.name, helper.exported, helper.has_receiver) == ("helper", False, False)
        assert helper.has_body is True
        assert asm.has_body is False

    def test_generic_receiver(self) -> None:
        decls = parse_declarations("package list\n\nfunc (l *List[T]) Push(v T) { l.items = append(l.items, v) }\n")
        assert decls.functions[0].name == "Push"
        assert decls.functions[0].has_receiver is True

    def test_find_function(self) -> None:
        decls = parse_declarations("package main\n\nfunc (a App) main() {}\nfunc main() {}\n")
        assert decls.find_function("main").has_receiver is False
        assert decls.find_function("main", method=True).has_receiver is True
        assert decls.find_function("init") is None

    def test_struct_return_type_is_skipped(self) -> None:
        decls = parse_declarations(
            "package p\n\nfunc Pair() struct{ A, B int } { return struct{ A, B int }{1, 2} }\n"
        )
        assert decls.functions[0].has_body is True

    def test_types_and_interfaces(self) -> None:
        decls = parse_declarations(
            "package p\n\n"
            "type Reader interface {\n\tRead() error\n}\n"
            "type (\n\tPoint struct{ X, Y int }\n\tcloser interface{ Close() }\n)\n"
            "type List[T any] struct{ items []T }\n"
            "type Set[K comparable] interface{ Has(K) bool }\n"
            "type Grid [3]int\n"
            "type Alias = Reader\n"
        )
        found = {t.name: (t.exported, t.is_interface) for t in decls.types}
        assert found == {
            "Reader": (True, True),
            "Point": (True, False),
            "closer": (False, True),
            "List": (True, False),
            "Set": (True, True),
            "Grid": (True, False),
            "Alias": (True, False),
        }

    def test_const_and_var_specs(self) -> None:
        decls = parse_declarations(
            "package p\n\n"
            "const (\n\tA = iota\n\tB\n\tc\n)\n"
            "var x, Y = 1, 2\n"
            "var buf bytes.Buffer\n"
            "var _ = x\n"
        )
        found = [(v.name, v.exported, v.kind) for v in decls.values]
        assert found == [
            ("A", True, "const"),
            ("B", True, "const"),
            ("c", False, "const"),
            ("x", False, "var"),
            ("Y", True, "var"),
            ("buf", False, "var"),
        ]

    def test_generate_directive(self) -> None:
        decls = parse_declarations("package p\n\n//go:generate stringer -type=Kind\ntype Kind int\n")
        assert decls.directives == ("//go:generate stringer -type=Kind",)


class TestFunctionBody:
    """Tests for call, literal and switch inspection inside bodies."""

    def _main(self, body: str):
        decls = parse_declarations(f"package main\n\nfunc main() {{\n{body}\n}}\n")
        return decls.find_function("main")

    def test_call_kinds(self) -> None:
        func = self._main('flag.Parse()\nfmt.Println("hi")\nos.Exit(1)\nlog.Fatalf("x %d", 1)')
        assert func.call_kinds() == frozenset({
            CallKind.FLAG_PARSING,
            CallKind.FORMATTED_OUTPUT,
            CallKind.PROCESS_EXIT,
            CallKind.FATAL_LOGGING,
        })

    def test_stdin_selector_without_call(self) -> None:
        func = self._main("r := os.Stdin\n_ = r")
        assert "os.Stdin" in func.selectors
        assert func.call_kinds() == frozenset({CallKind.STDIN_READING})

    def test_nested_selector_is_not_qualified_call(self) -> None:
        func = self._main("a.os.Exit(1)")
        assert "os.Exit" not in func.calls

    def test_literal_hints(self) -> None:
        func = self._main('fmt.Println(`Usage: tool [command]`)\nif arg == "--version" {\n}')
        assert func.literal_hints() == frozenset({
            LiteralHint.HELP,
            LiteralHint.SUBCOMMAND,
            LiteralHint.VERSION,
        })

    def test_string_literals_are_unquoted(self) -> None:
        func = self._main('fmt.Println("a\\"b", `raw\nline`)\n_ = \'x\'')
        assert func.string_literals == ('a\\"b', "raw\nline")

    def test_comments_do_not_affect_body(self) -> None:
        func = self._main("// close } early\nos.Exit(1) /* ( */")
        assert func.calls == frozenset({"os.Exit"})

    def test_closure_calls_are_included(self) -> None:
        func = self._main("defer func() {\n\tos.Exit(2)\n}()")
        assert func.call_kinds() == frozenset({CallKind.PROCESS_EXIT})

    def test_switch_detected(self) -> None:
        func = self._main('switch os.Args[1] {\ncase "run":\n}')
        assert func.has_switch is True

    def test_type_switch_ignored(self) -> None:
        func = self._main("var x interface{}\nswitch v := x.(type) {\ncase int:\n\t_ = v\n}")
        assert func.has_switch is False


class TestExtractDeclarations:
    """Tests for extract_declarations() on files."""

    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "main.go"
        path.write_text("package main\n\nfunc main() {}\n", encoding="utf-8")
        decls = extract_declarations(path)
        assert decls is not None
        assert decls.package == "main"

    def test_unparsable_file_returns_none(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.go"
        path.write_text("package main\n\nfunc main() {\n", encoding="utf-8")
        assert extract_declarations(path) is None

    def test_missing_file_returns_none(self, tmp_path: Path) -> None:
        assert extract_declarations(tmp_path / "absent.go") is None
