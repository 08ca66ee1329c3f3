"""Evaluator helper modules for the Qi runtime."""

__all__ = [
    "blocks",
    "chains",
    "common",
    "console",
    "control",
    "decl",
    "expr",
    "fn",
    "helpers",
    "literals",
    "loops",
]
