"""Helpers shared by the tree-sitter front end."""
