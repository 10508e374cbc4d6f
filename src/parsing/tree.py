from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# Marca de producción vacía en la derivación serializada
EMPTY = ".EMPTY"

# Símbolo inicial de la gramática
START_SYMBOL = "start"


def is_nonterminal(word: str) -> bool:
    """Un símbolo es no terminal si todas sus letras son minúsculas (``dcls``, ``expr``...)."""
    return all(ch.islower() for ch in word)


# Nodo del árbol de derivación. Es dueño exclusivo de sus hijos.
@dataclass(eq=False)
class Tree:
    rule: str                                         # Producción o tipo de token (hojas)
    children: List["Tree"] = field(default_factory=list, repr=False)
    type: str = ""                                    # "" = sin tipo, "int" o "int*"
    lexeme: str = ""                                  # Solo en hojas

    def add_child(self, child: "Tree") -> None:
        # Los literales tienen tipo fijo, no dependen del contexto
        if child.rule == "NUM":
            child.type = "int"
        elif child.rule == "NULL":
            child.type = "int*"
        self.children.append(child)

    @property
    def is_terminal(self) -> bool:
        return not is_nonterminal(self.rule)

    @property
    def shape(self) -> Tuple[str, ...]:
        """Nombres de regla de los hijos, p. ej. ``("expr", "PLUS", "term")``."""
        return tuple(c.rule for c in self.children)

    def child(self, i: int) -> Optional["Tree"]:
        # Los árboles parciales pueden no tener todos los hijos esperados
        if 0 <= i < len(self.children):
            return self.children[i]
        return None

    def child_type(self, i: int) -> str:
        c = self.child(i)
        return c.type if c is not None else ""

    def walk(self):
        """Recorre el subárbol en preorden."""
        # Pila explícita: la cadena de statements crece un nivel por sentencia
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))
