from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from semantic.diagnostics import Diagnostic, Diagnostics
from .tree import EMPTY, START_SYMBOL, Tree, is_nonterminal

@dataclass
class BuildResult:
    """Contenedor para el árbol reconstruido y los errores de reconstrucción."""
    tree: Optional[Tree]
    errors: List[Diagnostic]

    def is_valid(self) -> bool:
        return self.tree is not None and not self.errors


class TreeBuilder:
    """
    Reconstruye el árbol de derivación a partir de sus líneas serializadas.

    Cada línea describe un nodo en preorden:
      * no terminal: ``expr expr PLUS term`` (regla seguida de las reglas hijas)
      * terminal:    ``ID x`` (tipo de token seguido del lexema)

    Los errores no detienen el proceso completo: la rama afectada se abandona
    y el árbol puede quedar parcial. Cuando ya hay algún diagnóstico, no se
    consumen más hijos.
    """

    def __init__(self, lines: Iterable[str], diag: Optional[Diagnostics] = None) -> None:
        self.lines: List[str] = list(lines)
        self.idx = 0
        self.diag = diag if diag is not None else Diagnostics()

    def _error(self, code: str, msg: str, **extra) -> None:
        self.diag.add(phase="syntax", code=code, message=msg, index=self.idx, **extra)

    def build(self) -> Optional[Tree]:
        # La primera línea debe ser exactamente el símbolo inicial
        head = self.lines[0].split() if self.lines else []
        if not head or head[0] != START_SYMBOL:
            self.diag.add(phase="syntax", code="E000", message="invalid first expression")
            return None
        self.idx = 0
        root = Tree(START_SYMBOL)
        self._build(root)
        return root

    def _read(self, node: Tree) -> Iterator[str]:
        """Lee la línea del cursor en `node`; devuelve las reglas hijas pendientes."""
        words = self.lines[self.idx].split()
        head = words[0] if words else ""

        if not is_nonterminal(head):
            if len(words) < 2:
                self._error("E011", f"missing lexeme for terminal symbol {head}", rule=head)
            else:
                node.lexeme = words[1]
            return iter(())
        return iter(words[1:])

    def _build(self, root: Tree) -> None:
        # Pila explícita de (nodo, hijos pendientes). Un hijo se agrega a su
        # padre cuando su subárbol termina.
        stack = [(root, self._read(root))]
        while stack:
            node, pending = stack[-1]
            child_rule = next(pending, EMPTY)
            # Producción vacía, fin de la línea o error previo
            if child_rule == EMPTY or not self.diag.empty():
                self._finish(stack)
                continue
            self.idx += 1
            if self.idx >= len(self.lines):
                self._error("E010", "unexpected end of file", rule=child_rule)
                self._finish(stack)
                continue
            child = Tree(child_rule)
            stack.append((child, self._read(child)))

    @staticmethod
    def _finish(stack) -> None:
        node, _ = stack.pop()
        if stack:
            stack[-1][0].add_child(node)


def build_from_lines(lines: Iterable[str], diag: Optional[Diagnostics] = None) -> BuildResult:
    builder = TreeBuilder(lines, diag)
    tree = builder.build()
    return BuildResult(tree=tree, errors=list(builder.diag))

def build_from_text(text: str, diag: Optional[Diagnostics] = None) -> BuildResult:
    return build_from_lines(text.splitlines(), diag)

def build_from_file(
    path: Union[str, Path],
    *,
    encoding: Optional[str] = "utf-8",
    diag: Optional[Diagnostics] = None,
) -> BuildResult:
    return build_from_text(Path(path).read_text(encoding=encoding), diag)
