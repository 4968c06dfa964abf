"""
Go 声明提取

使用 tree-sitter-go 解析 Go 源文件，提取：
- 包名与导入路径
- 函数与方法（附带函数体检查：限定调用、选择器、字符串字面量、switch）
- 类型声明、常量与变量声明
- 含 go:generate 的注释
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from go_detector.core.patterns import (
    CALL_VOCABULARY,
    GENERATE_DIRECTIVE,
    LITERAL_HINTS,
    SELECTOR_VOCABULARY,
    CallKind,
    LiteralHint,
)
from go_detector.errors import DeclarationError

logger = logging.getLogger(__name__)

# 文件大小限制 (10MB)，超过视为无法解析
SOURCE_SIZE_LIMIT = 10 * 1024 * 1024

GO_LANGUAGE = Language(tree_sitter_go.language())

_STRING_NODES = frozenset({"interpreted_string_literal", "raw_string_literal"})


# ============================================================
# 数据模型
# ============================================================

@dataclass(frozen=True)
class FunctionDecl:
    """
    函数声明

    Attributes:
        name: 函数名
        exported: 是否导出（首字母大写）
        has_receiver: 是否为方法
        has_body: 是否有函数体
        calls: 函数体内的限定调用 (如 os.Exit)
        selectors: 函数体内未被调用的限定选择器 (如 os.Stdin)
        string_literals: 函数体内字符串字面量内容
        has_switch: 函数体内是否有 switch 语句（不含 type switch）
    """
    name: str
    exported: bool
    has_receiver: bool
    has_body: bool = False
    calls: frozenset[str] = frozenset()
    selectors: frozenset[str] = frozenset()
    string_literals: tuple[str, ...] = ()
    has_switch: bool = False

    def call_kinds(self) -> frozenset[CallKind]:
        """Recognized call kinds used in the body."""
        kinds = {CALL_VOCABULARY[c] for c in self.calls if c in CALL_VOCABULARY}
        kinds.update(SELECTOR_VOCABULARY[s] for s in self.selectors if s in SELECTOR_VOCABULARY)
        return frozenset(kinds)

    def literal_hints(self) -> frozenset[LiteralHint]:
        """Hints found in the body's string literals."""
        hints: set[LiteralHint] = set()
        for literal in self.string_literals:
            lowered = literal.lower()
            for hint, needles in LITERAL_HINTS.items():
                if any(needle in lowered for needle in needles):
                    hints.add(hint)
        return frozenset(hints)


@dataclass(frozen=True)
class TypeDecl:
    name: str
    exported: bool
    is_interface: bool


@dataclass(frozen=True)
class ValueDecl:
    name: str
    exported: bool
    kind: str  # "const" | "var"


@dataclass(frozen=True)
class Declarations:
    """
    单个源文件的声明清单

    Attributes:
        package: 包名
        imports: 导入路径（源码顺序）
        functions: 函数与方法
        types: 类型声明
        values: 常量与变量声明
        directives: 含 go:generate 的注释
    """
    package: str
    imports: tuple[str, ...] = ()
    functions: tuple[FunctionDecl, ...] = ()
    types: tuple[TypeDecl, ...] = ()
    values: tuple[ValueDecl, ...] = ()
    directives: tuple[str, ...] = ()

    def find_function(self, name: str, method: bool = False) -> Optional[FunctionDecl]:
        for func in self.functions:
            if func.name == name and func.has_receiver == method:
                return func
        return None


# ============================================================
# 语法树遍历
# ============================================================

def _is_exported(name: str) -> bool:
    return bool(name) and name[0].isupper()


def _walk(node: Node) -> Iterator[Node]:
    """Pre-order walk, children in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _first_error(root: Node) -> Optional[Node]:
    for node in _walk(root):
        if node.type == "ERROR" or node.is_missing:
            return node
    return None


def _specs(declaration: Node, spec_types: tuple[str, ...]) -> Iterator[Node]:
    """Specs of `kw spec` or `kw ( spec; spec )`."""
    for child in declaration.named_children:
        if child.type in spec_types:
            yield child
        elif child.type.endswith("_list"):
            # import_spec_list / var_spec_list
            yield from _specs(child, spec_types)


class _DeclarationVisitor:
    """遍历顶层声明"""

    def __init__(self, source: bytes):
        self.source = source
        self.imports: list[str] = []
        self.functions: list[FunctionDecl] = []
        self.types: list[TypeDecl] = []
        self.values: list[ValueDecl] = []

    def text(self, node: Node) -> str:
        return self.source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def unquote(self, node: Node) -> str:
        return self.text(node)[1:-1]

    def visit(self, root: Node) -> Declarations:
        package: Optional[str] = None
        for node in root.named_children:
            if node.type == "package_clause":
                if package is None and node.named_children:
                    package = self.text(node.named_children[0])
            elif node.type == "import_declaration":
                for spec in _specs(node, ("import_spec",)):
                    path = spec.child_by_field_name("path")
                    if path is not None:
                        self.imports.append(self.unquote(path))
            elif node.type in ("function_declaration", "method_declaration"):
                self._function(node)
            elif node.type == "type_declaration":
                for spec in _specs(node, ("type_spec", "type_alias")):
                    self._type_spec(spec)
            elif node.type == "const_declaration":
                for spec in _specs(node, ("const_spec",)):
                    self._value_spec(spec, "const")
            elif node.type == "var_declaration":
                for spec in _specs(node, ("var_spec",)):
                    self._value_spec(spec, "var")

        if package is None:
            raise DeclarationError("missing package clause")

        directives = tuple(
            self.text(node) for node in _walk(root)
            if node.type == "comment" and GENERATE_DIRECTIVE in self.text(node)
        )
        return Declarations(
            package=package,
            imports=tuple(self.imports),
            functions=tuple(self.functions),
            types=tuple(self.types),
            values=tuple(self.values),
            directives=directives,
        )

    def _type_spec(self, spec: Node) -> None:
        name_node = spec.child_by_field_name("name")
        if name_node is None:
            return
        name = self.text(name_node)
        type_node = spec.child_by_field_name("type")
        is_interface = type_node is not None and type_node.type == "interface_type"
        self.types.append(TypeDecl(name=name, exported=_is_exported(name), is_interface=is_interface))

    def _value_spec(self, spec: Node, kind: str) -> None:
        for name_node in spec.children_by_field_name("name"):
            if not name_node.is_named:
                continue  # 逗号
            name = self.text(name_node)
            if name != "_":
                self.values.append(ValueDecl(name=name, exported=_is_exported(name), kind=kind))

    def _function(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        name = self.text(name_node)
        has_receiver = node.type == "method_declaration"
        body = node.child_by_field_name("body")
        if body is None:
            self.functions.append(
                FunctionDecl(name=name, exported=_is_exported(name), has_receiver=has_receiver)
            )
            return
        self.functions.append(self._inspect_body(name, has_receiver, body))

    def _qualified(self, selector: Node) -> Optional[str]:
        """`pkg.Name` when the operand is a plain identifier"""
        operand = selector.child_by_field_name("operand")
        field = selector.child_by_field_name("field")
        if operand is None or field is None or operand.type != "identifier":
            return None
        return f"{self.text(operand)}.{self.text(field)}"

    def _inspect_body(self, name: str, has_receiver: bool, body: Node) -> FunctionDecl:
        calls: set[str] = set()
        selectors: set[str] = set()
        literals: list[str] = []
        has_switch = False
        called: set[tuple[int, int]] = set()

        stack = [body]
        while stack:
            node = stack.pop()
            kind = node.type
            if kind in _STRING_NODES:
                literals.append(self.unquote(node))
                continue
            if kind == "expression_switch_statement":
                has_switch = True
            elif kind == "call_expression":
                function = node.child_by_field_name("function")
                if function is not None and function.type == "selector_expression":
                    qualified = self._qualified(function)
                    if qualified is not None:
                        calls.add(qualified)
                        called.add((function.start_byte, function.end_byte))
            elif kind == "selector_expression" and (node.start_byte, node.end_byte) not in called:
                qualified = self._qualified(node)
                if qualified is not None:
                    selectors.add(qualified)
            stack.extend(reversed(node.children))

        return FunctionDecl(
            name=name,
            exported=_is_exported(name),
            has_receiver=has_receiver,
            has_body=True,
            calls=frozenset(calls),
            selectors=frozenset(selectors),
            string_literals=tuple(literals),
            has_switch=has_switch,
        )


# ============================================================
# 对外接口
# ============================================================

def parse_declarations(source: str) -> Declarations:
    """
    Parse Go source text into Declarations.

    Raises:
        DeclarationError: source is not a well-formed Go file
    """
    if source.startswith("\ufeff"):
        source = source[1:]
    data = source.encode("utf-8")
    # Parser 不是线程安全的，批量模式下每次解析各用一个
    tree = Parser(GO_LANGUAGE).parse(data)
    root = tree.root_node
    if root.has_error:
        error = _first_error(root)
        line = error.start_point[0] + 1 if error is not None else 0
        raise DeclarationError(f"syntax error near line {line}")
    return _DeclarationVisitor(data).visit(root)


def extract_declarations(path: Path) -> Optional[Declarations]:
    """
    Extract declarations from one file.

    Returns None when the file cannot be read or parsed; the failure is
    logged and never propagated.
    """
    try:
        if path.stat().st_size > SOURCE_SIZE_LIMIT:
            logger.warning(f"File {path} exceeds {SOURCE_SIZE_LIMIT} bytes, skipping")
            return None
        source = path.read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")
        return None

    try:
        return parse_declarations(source)
    except DeclarationError as e:
        logger.debug(f"Skipping unparsable file {path}: {e}")
        return None
