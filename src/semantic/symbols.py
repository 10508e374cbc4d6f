from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

@dataclass
class VariableSymbol:
    name: str
    type: str  # "int" o "int*"

@dataclass
class ProcedureSymbol:
    name: str
    params: List[str] = field(default_factory=list)  # Tipos de los parámetros, en orden
