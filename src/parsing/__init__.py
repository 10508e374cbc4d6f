from .tree import Tree, EMPTY, START_SYMBOL, is_nonterminal
from .tree_builder import BuildResult, TreeBuilder, build_from_lines, build_from_text, build_from_file
from .printer import format_node, format_tree, tree_to_text, print_tree

__all__ = [
    "Tree", "EMPTY", "START_SYMBOL", "is_nonterminal",
    "BuildResult", "TreeBuilder", "build_from_lines", "build_from_text", "build_from_file",
    "format_node", "format_tree", "tree_to_text", "print_tree",
]
