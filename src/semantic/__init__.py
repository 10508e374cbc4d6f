"""
Módulo de análisis semántico para derivaciones con tipos int / int*.
Exporta la función principal 'analyze' y las clases de símbolos y tipos.
"""

from .checker import analyze, check, TypeChecker, CheckerOptions
from .symbols import VariableSymbol, ProcedureSymbol
from .symbol_table import SymbolTable, Scope, ProcedureTable
from .types import (
    INT,
    PTR,
    UNSET,
    is_int,
    is_pointer,
    is_known,
    type_from_clause,
)
from .diagnostics import Diagnostic, Diagnostics

__all__ = [
    # Función principal
    'analyze',
    'check',

    # Recorrido
    'TypeChecker',
    'CheckerOptions',

    # Símbolos
    'VariableSymbol',
    'ProcedureSymbol',

    # Tablas
    'SymbolTable',
    'Scope',
    'ProcedureTable',

    # Tipos
    'INT',
    'PTR',
    'UNSET',
    'is_int',
    'is_pointer',
    'is_known',
    'type_from_clause',

    # Diagnósticos
    'Diagnostic',
    'Diagnostics',
]
