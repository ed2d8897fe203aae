"""Lowering of tree-sitter Python parse trees into statement trees."""

import re

import tree_sitter_python
from loguru import logger
from tree_sitter import Language, Node, Parser

from ..errors import FunctionNotFoundError
from ..utils.ast_helpers import (
    get_body,
    get_end_line_number,
    get_function_name,
    get_header_text,
    get_line_number,
    get_node_text,
    get_statement_children,
)
from .statements import (
    BreakStatement,
    ContinueStatement,
    ExceptHandler,
    ForStatement,
    FunctionBody,
    IfStatement,
    MatchCase,
    MatchStatement,
    RaiseStatement,
    ReturnStatement,
    SimpleStatement,
    Statement,
    TryStatement,
    WhileStatement,
)

PY_LANGUAGE = Language(tree_sitter_python.language())

EXCEPT_HEADER = re.compile(r"^except\*?\s*(?P<type>.*?)(?:\s+as\s+(?P<name>\w+))?$", re.S)

TERMINAL_TYPES = {
    "return_statement": ReturnStatement,
    "raise_statement": RaiseStatement,
    "break_statement": BreakStatement,
    "continue_statement": ContinueStatement,
}


def create_python_parser() -> Parser:
    return Parser(PY_LANGUAGE)


class PythonFrontend:
    """Parses Python source and lowers each function into a FunctionBody."""

    def __init__(self, parser: Parser | None = None):
        self.parser = parser or create_python_parser()
        self._source = b""

    def parse_functions(
        self, source: str, source_path: str | None = None
    ) -> list[FunctionBody]:
        """Every function in ``source``, methods and nested functions included."""
        self._source = source.encode("utf-8")
        tree = self.parser.parse(self._source)
        if tree.root_node.has_error:
            logger.warning(
                f"Syntax errors in {source_path or '<source>'}; "
                f"analyzing the recoverable parts"
            )

        functions: list[FunctionBody] = []
        self._collect(tree.root_node, [], functions, source_path)
        logger.debug(f"Found {len(functions)} functions in {source_path or '<source>'}")
        return functions

    def get_function(
        self, source: str, name: str, source_path: str | None = None
    ) -> FunctionBody:
        """Look a function up by plain or qualified name (``Class.method``)."""
        functions = self.parse_functions(source, source_path)
        for function in functions:
            if name in (function.qualified_name, function.name):
                return function
        raise FunctionNotFoundError(name, [f.display_name for f in functions])

    def _collect(
        self,
        node: Node,
        scope: list[str],
        functions: list[FunctionBody],
        source_path: str | None,
    ) -> None:
        for child in node.named_children:
            if child.type == "function_definition":
                name = get_function_name(child, self._source) or "func"
                functions.append(self.lower_function(child, scope, source_path))
                self._collect(child, scope + [name], functions, source_path)
            elif child.type == "class_definition":
                name = get_function_name(child, self._source) or "Class"
                self._collect(child, scope + [name], functions, source_path)
            else:
                self._collect(child, scope, functions, source_path)

    def lower_function(
        self,
        node: Node,
        scope: list[str] | None = None,
        source_path: str | None = None,
    ) -> FunctionBody:
        name = get_function_name(node, self._source) or "func"
        body = get_body(node)
        return FunctionBody(
            name=name,
            body=self._lower_block(body),
            start_line=get_line_number(node),
            qualified_name=".".join((scope or []) + [name]),
            source_path=source_path,
        )

    # -- statements ---------------------------------------------------------

    def _lower_block(self, block: Node | None) -> list[Statement]:
        if block is None:
            return []
        statements: list[Statement] = []
        for child in get_statement_children(block):
            statements.extend(self._lower_statement(child))
        return statements

    def _span(self, node: Node) -> tuple[int, int]:
        return get_line_number(node), get_end_line_number(node)

    def _lower_statement(self, node: Node) -> list[Statement]:
        kind = node.type
        if kind == "if_statement":
            return [self._lower_if(node)]
        if kind == "while_statement":
            return [self._lower_while(node)]
        if kind == "for_statement":
            return [self._lower_for(node)]
        if kind == "match_statement":
            return [self._lower_match(node)]
        if kind == "try_statement":
            return [self._lower_try(node)]
        if kind == "with_statement":
            return self._lower_with(node)
        if kind in TERMINAL_TYPES:
            start, end = self._span(node)
            return [TERMINAL_TYPES[kind](get_node_text(node, self._source), start, end)]

        start, end = self._span(node)
        return [SimpleStatement(get_node_text(node, self._source), start, end)]

    def _text(self, node: Node | None) -> str | None:
        if node is None:
            return None
        return get_node_text(node, self._source) or None

    def _lower_if(self, node: Node) -> IfStatement:
        consequence = get_body(node, "consequence")
        start, end = self._span(node)
        return IfStatement(
            text=get_header_text(node, consequence, self._source),
            start_line=start,
            end_line=end,
            condition=self._text(node.child_by_field_name("condition")),
            body=self._lower_block(consequence),
            orelse=self._lower_alternatives(node.children_by_field_name("alternative")),
        )

    def _lower_alternatives(self, alternatives: list[Node]) -> list[Statement]:
        """``elif`` chains become nested IfStatements in the else block."""
        if not alternatives:
            return []
        first = alternatives[0]
        if first.type == "elif_clause":
            consequence = get_body(first, "consequence")
            start = get_line_number(first)
            end = get_end_line_number(alternatives[-1])
            return [
                IfStatement(
                    text=get_header_text(first, consequence, self._source),
                    start_line=start,
                    end_line=end,
                    condition=self._text(first.child_by_field_name("condition")),
                    body=self._lower_block(consequence),
                    orelse=self._lower_alternatives(alternatives[1:]),
                )
            ]
        return self._lower_block(get_body(first))

    def _lower_loop_else(self, node: Node) -> list[Statement]:
        alternative = node.child_by_field_name("alternative")
        if alternative is None:
            return []
        return self._lower_block(get_body(alternative))

    def _lower_while(self, node: Node) -> WhileStatement:
        body = get_body(node)
        start, end = self._span(node)
        return WhileStatement(
            text=get_header_text(node, body, self._source),
            start_line=start,
            end_line=end,
            condition=self._text(node.child_by_field_name("condition")),
            body=self._lower_block(body),
            orelse=self._lower_loop_else(node),
        )

    def _lower_for(self, node: Node) -> ForStatement:
        body = get_body(node)
        start, end = self._span(node)
        return ForStatement(
            text=get_header_text(node, body, self._source),
            start_line=start,
            end_line=end,
            target=self._text(node.child_by_field_name("left")),
            iterable=self._text(node.child_by_field_name("right")),
            body=self._lower_block(body),
            orelse=self._lower_loop_else(node),
        )

    def _lower_match(self, node: Node) -> MatchStatement:
        body = node.child_by_field_name("body") or node
        subjects = [
            get_node_text(s, self._source)
            for s in node.children_by_field_name("subject")
        ]
        cases = [
            self._lower_case(child)
            for child in body.named_children
            if child.type == "case_clause"
        ]
        start, end = self._span(node)
        subject = ", ".join(subjects) or None
        return MatchStatement(
            text=f"match {subject or ''}".rstrip(),
            start_line=start,
            end_line=end,
            subject=subject,
            cases=cases,
        )

    def _lower_case(self, node: Node) -> MatchCase:
        patterns = [
            get_node_text(child, self._source)
            for child in node.named_children
            if child.type == "case_pattern"
        ]
        guard = node.child_by_field_name("guard")
        guard_text = self._text(guard)
        if guard_text and guard_text.startswith("if "):
            guard_text = guard_text[3:].strip()
        body = get_body(node, "consequence")

        pattern = ", ".join(patterns) or None
        if pattern is None:
            # Grammar versions without case_pattern nodes: read the header.
            header = get_header_text(node, body, self._source)
            if header.startswith("case "):
                header = header[5:]
            if guard is not None:
                header = header.split(" if ", 1)[0]
            pattern = header.strip() or None

        return MatchCase(
            pattern=pattern,
            line=get_line_number(node),
            guard=guard_text,
            body=self._lower_block(body),
        )

    def _lower_handler(self, node: Node) -> ExceptHandler:
        block = get_body(node)
        header = get_header_text(node, block, self._source)
        match = EXCEPT_HEADER.match(header)
        type_text = name = None
        if match:
            type_text = match.group("type").strip() or None
            name = match.group("name")
        return ExceptHandler(
            line=get_line_number(node),
            type_text=type_text,
            name=name,
            body=self._lower_block(block),
        )

    def _lower_try(self, node: Node) -> TryStatement:
        body = get_body(node)
        start, end = self._span(node)
        stmt = TryStatement(
            text="try",
            start_line=start,
            end_line=end,
            body=self._lower_block(body),
        )
        for child in node.named_children:
            if child.type in ("except_clause", "except_group_clause"):
                stmt.handlers.append(self._lower_handler(child))
            elif child.type == "else_clause":
                stmt.orelse = self._lower_block(get_body(child))
            elif child.type == "finally_clause":
                stmt.finalbody = self._lower_block(get_body(child))
                stmt.finally_line = get_line_number(child)
        return stmt

    def _lower_with(self, node: Node) -> list[Statement]:
        """The context-manager header runs first, then the body unconditionally."""
        body = get_body(node)
        start = get_line_number(node)
        header_end = get_line_number(body) - 1 if body is not None else start
        header = SimpleStatement(
            get_header_text(node, body, self._source), start, max(start, header_end)
        )
        return [header] + self._lower_block(body)


def parse_functions(source: str, source_path: str | None = None) -> list[FunctionBody]:
    return PythonFrontend().parse_functions(source, source_path)
