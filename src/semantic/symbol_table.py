from __future__ import annotations  # Permite las anotaciones de tipo en el mismo archivo antes de Python 3.10.
from dataclasses import dataclass, field
from typing import Dict, Optional, List
from .symbols import VariableSymbol, ProcedureSymbol

# Alcance de un procedimiento: nombre de variable -> símbolo.
# No hay alcance global ni búsqueda en alcances externos.
@dataclass
class Scope:
    name: str = ""   # Número/nombre del procedimiento dueño del alcance
    symbols: Dict[str, VariableSymbol] = field(default_factory=dict)

    # Define un nuevo símbolo en este alcance.
    def define(self, sym: VariableSymbol):
        if sym.name in self.symbols:
            # Se conserva la declaración original
            raise KeyError(f"Variable {sym.name} is already declared")
        self.symbols[sym.name] = sym

    def resolve(self, name: str) -> Optional[VariableSymbol]:
        return self.symbols.get(name)

# Pila de alcances. En la práctica solo hay uno vivo: se reemplaza al entrar a cada procedimiento.
class SymbolTable:
    def __init__(self):
        self._stack: List[Scope] = []
        self._history: List[Scope] = []  # Todos los alcances creados, para dump()

    @property
    def current(self) -> Optional[Scope]:
        return self._stack[-1] if self._stack else None

    def push(self, name: str = "") -> Scope:
        scope = Scope(name=name)
        self._stack.append(scope)
        self._history.append(scope)
        return scope

    def pop(self) -> Scope:
        if not self._stack:
            raise RuntimeError("No scope to pop")
        return self._stack.pop()

    def empty(self) -> bool:
        return not self._stack

    def dump(self) -> list:
        out = []
        for s in self._history:
            out.append({
                "scope": s.name,
                "entries": [{"name": k, "type": v.type} for k, v in s.symbols.items()],
            })
        return out

# Registro global de procedimientos: nombre -> lista ordenada de tipos de parámetros.
class ProcedureTable:
    def __init__(self):
        self.table: Dict[str, ProcedureSymbol] = {}

    def define(self, proc: ProcedureSymbol):
        if proc.name in self.table:
            # Gana el primer registro
            raise KeyError(f"procedure already exists: {proc.name}")
        self.table[proc.name] = proc

    def dump(self) -> list:
        return [{"name": p.name, "params": list(p.params)} for p in self.table.values()]
