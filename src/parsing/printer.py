from __future__ import annotations
import sys
from typing import List, TextIO

from .tree import EMPTY, Tree

def format_node(node: Tree) -> str:
    """Una línea de la derivación anotada, sin los hijos."""
    if node.is_terminal:
        line = f"{node.rule} {node.lexeme}"
    elif node.children:
        line = " ".join([node.rule, *node.shape])
    else:
        line = f"{node.rule} {EMPTY}"
    if node.type:
        line += f" : {node.type}"
    return line

def format_tree(tree: Tree) -> List[str]:
    # Preorden: el nodo antes que sus hijos
    return [format_node(n) for n in tree.walk()]

def tree_to_text(tree: Tree) -> str:
    return "".join(line + "\n" for line in format_tree(tree))

def print_tree(tree: Tree, out: TextIO = None) -> None:
    out = out or sys.stdout
    for line in format_tree(tree):
        print(line, file=out)
