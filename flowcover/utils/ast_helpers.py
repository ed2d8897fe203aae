"""AST helper functions for tree-sitter parsing."""

from tree_sitter import Node


def get_node_text(node: Node | None, source: bytes) -> str:
    """Extract text content from a tree-sitter node."""
    if not node:
        return ""
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def get_header_text(node: Node, body: Node | None, source: bytes) -> str:
    """Text of a compound statement or clause up to its body, without the colon."""
    if body is None:
        text = get_node_text(node, source).split("\n", 1)[0]
    else:
        text = source[node.start_byte:body.start_byte].decode("utf-8", errors="replace")
    return " ".join(text.strip().rstrip(":").split())


def get_statement_children(node: Node) -> list[Node]:
    """Named children of a block, comments left out."""
    return [child for child in node.named_children if child.type != "comment"]


def get_first_child_of_type(node: Node, child_type: str) -> Node | None:
    for child in node.named_children:
        if child.type == child_type:
            return child
    return None


def get_body(node: Node, field_name: str = "body") -> Node | None:
    """The block of a compound statement, by field name or by node type."""
    body = node.child_by_field_name(field_name)
    if body is None:
        body = get_first_child_of_type(node, "block")
    return body


def get_function_name(node: Node, source: bytes) -> str | None:
    """Extract function name from a function node."""
    if node.type in ["function_definition", "class_definition"]:
        name = node.child_by_field_name("name")
        if name is not None:
            return get_node_text(name, source)
        for child in node.children:
            if child.type == "identifier":
                return get_node_text(child, source)
    return None


def get_line_number(node: Node) -> int:
    """Get the line number of a node (1-indexed)."""
    return node.start_point[0] + 1


def get_end_line_number(node: Node) -> int:
    """Get the last line number of a node (1-indexed)."""
    return node.end_point[0] + 1
