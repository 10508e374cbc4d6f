# semantic/checker.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

from parsing.tree import Tree

from .types import INT, PTR, UNSET, is_int, is_pointer, is_known, both_known, type_from_clause
from .symbols import VariableSymbol, ProcedureSymbol
from .symbol_table import SymbolTable, ProcedureTable
from .diagnostics import Diagnostics


@dataclass
class CheckerOptions:
    # Exige que la expresión de cada `return` sea int (apagado por defecto)
    check_returns: bool = False


# Operadores multiplicativos de la regla `term term OP factor`
_MUL_OPS = ("STAR", "SLASH", "PCT")

# Listas de argumentos y parámetros no llevan tipo
_UNTYPED = ("arglist", "params", "paramlist")


# -----------------------------------------------------------------------------
# Recorrido semántico principal
# -----------------------------------------------------------------------------
class TypeChecker:
    """
    Recorre el árbol de derivación una sola vez.

    Al entrar a un nodo (``enterX``) se hacen las declaraciones: alcances,
    procedimientos, parámetros y variables. Al salir (``exitX``) todos los
    hijos ya tienen tipo, se aplica el caso base (tipo del primer hijo) y
    luego la regla específica de la producción.

    Reglas implementadas (resumen):
      • Un alcance por procedimiento, sin búsqueda en alcances externos
      • Registro de procedimientos con la lista de tipos de sus parámetros
      • Segundo parámetro de wain debe ser int
      • Inicializador de declaración del mismo tipo que la variable
      • Aritmética de punteros (+, -) y operandos int en *, /, %
      • Desreferencia, dirección (&), new
      • Asignación, println, delete[] y comparaciones
    Ningún error detiene el recorrido; un tipo sin resolver ("") no genera
    más errores en las reglas que dependen de él.
    """

    def __init__(self, options: Optional[CheckerOptions] = None, diag: Optional[Diagnostics] = None) -> None:
        self.options = options or CheckerOptions()
        self.diag = diag if diag is not None else Diagnostics()
        self.symtab = SymbolTable()
        self.procedures = ProcedureTable()
        self.procedure_count = 0
        self._proc_name = ""
        self._param_types: List[str] = []

    # --------------- helpers de reporte/definición/resolución ---------------
    def _error(self, code: str, msg: str, node: Tree, **extra) -> None:
        self.diag.add(phase="semantic", code=code, message=msg, rule=node.rule, **extra)

    def _declare(self, name: str, typ: str, node: Tree) -> None:
        scope = self.symtab.current or self.symtab.push()
        try:
            scope.define(VariableSymbol(name=name, type=typ))
        except KeyError as e:
            self._error("E001", e.args[0], node, name=name)

    def _lookup(self, name: str, node: Tree) -> str:
        scope = self.symtab.current
        sym = scope.resolve(name) if scope is not None else None
        if sym is None:
            self._error("E002", f"Variable {name} was not declared", node, name=name)
            return UNSET
        return sym.type

    def _register(self, name: str, params: List[str], node: Tree) -> None:
        try:
            self.procedures.define(ProcedureSymbol(name=name, params=list(params)))
        except KeyError as e:
            self._error("E003", e.args[0], node, name=name)

    # ------------------------------ recorrido ------------------------------
    def check(self, tree: Tree) -> "TypeChecker":
        self.visit(tree)
        return self

    def visit(self, root: Tree) -> None:
        # Pila explícita; cada nodo se apila dos veces: entrada y salida
        stack = [(root, False)]
        while stack:
            node, leaving = stack.pop()
            if leaving:
                self._leave(node)
                continue
            enter = getattr(self, f"enter{node.rule.capitalize()}", None)
            if enter is not None and not node.is_terminal:
                enter(node)
            stack.append((node, True))
            stack.extend((c, False) for c in reversed(node.children))

    def _leave(self, node: Tree) -> None:
        # Caso base: el tipo del primer hijo
        if node.children and node.rule not in _UNTYPED:
            node.type = node.children[0].type

        leave = getattr(self, f"exit{node.rule.capitalize()}", None)
        if leave is not None and not node.is_terminal:
            leave(node)

    # ------------------------------ procedimientos ------------------------------
    def enterProcedures(self, node: Tree):
        if self.procedure_count != 0 and not self.symtab.empty():
            self.symtab.pop()
        self.symtab.push()
        self.procedure_count += 1

    # procedure INT ID LPAREN params RPAREN LBRACE dcls statements RETURN expr SEMI RBRACE
    def enterProcedure(self, node: Tree):
        name = node.child(1)
        self._proc_name = name.lexeme if name is not None else ""
        self._param_types = []
        if self.symtab.current is not None:
            self.symtab.current.name = self._proc_name

        params = node.child(3)
        if params is not None and params.rule == "params" and not params.children:
            self._register(self._proc_name, [], node)

    # paramlist dcl | dcl COMMA paramlist
    def enterParamlist(self, node: Tree):
        dcl = node.child(0)
        self._param_types.append(type_from_clause(dcl.child(0) if dcl is not None else None))
        nested = node.child(2)
        if nested is None or nested.rule != "paramlist":
            self._register(self._proc_name, self._param_types, node)

    # main INT WAIN LPAREN dcl COMMA dcl RPAREN LBRACE dcls statements RETURN expr SEMI RBRACE
    def enterMain(self, node: Tree):
        if self.symtab.current is not None:
            self.symtab.current.name = "wain"
        second = node.child(5)
        if second is None:
            return
        t = type_from_clause(second.child(0))
        if is_known(t) and t != INT:
            self._error("E103", "second parameter of entry point is not int type", node)

    def exitProcedure(self, node: Tree):
        self._check_return(node)

    def exitMain(self, node: Tree):
        self._check_return(node)

    def _check_return(self, node: Tree) -> None:
        if not self.options.check_returns or "RETURN" not in node.shape:
            return
        t = node.child_type(node.shape.index("RETURN") + 1)
        if is_known(t) and t != INT:
            self._error("E103", "return type is not int", node)

    # ------------------------------ declaraciones ------------------------------
    # dcl type ID
    def enterDcl(self, node: Tree):
        ident = node.child(1)
        t = type_from_clause(node.child(0))
        if ident is None or not is_known(t):
            return
        self._declare(ident.lexeme, t, node)
        ident.type = t

    def exitDcl(self, node: Tree):
        t = type_from_clause(node.child(0))
        if is_known(t):
            node.type = t

    # dcls dcls dcl BECOMES NUM SEMI | dcls dcls dcl BECOMES NULL SEMI
    def exitDcls(self, node: Tree):
        if len(node.children) != 5:
            return
        declared = node.child_type(1)
        init = node.child_type(3)
        if both_known(declared, init) and declared != init:
            self._error("E101", f"type casting error: cannot initialize {declared} with {init}", node)

    # ------------------------------ expresiones ------------------------------
    def _leaf_type(self, leaf: Tree) -> str:
        if leaf.rule == "NUM":
            return INT
        if leaf.rule == "NULL":
            return PTR
        if leaf.rule == "ID":
            return self._lookup(leaf.lexeme, leaf)
        return leaf.type

    def _deref(self, node: Tree) -> str:
        operand = node.child_type(1)
        if not is_known(operand):
            return UNSET
        if operand != PTR:
            self._error("E102", f"expected pointer operand for dereference, got {operand}", node)
        return INT

    def exitFactor(self, node: Tree):
        shape = node.shape
        if not shape:
            return
        if len(shape) == 1:
            leaf = node.children[0]
            node.type = leaf.type = self._leaf_type(leaf)
        elif shape[0] == "LPAREN":
            node.type = node.child_type(1)
        elif shape[0] == "STAR":
            node.type = self._deref(node)
        elif shape[0] == "NEW":
            node.type = PTR
        elif shape[0] == "AMP":
            operand = node.child_type(1)
            if not is_known(operand):
                node.type = UNSET
                return
            if operand != INT:
                self._error("E102", f"expected int operand for address-of, got {operand}", node)
            node.type = PTR
        elif shape[:2] == ("ID", "LPAREN"):
            # Llamada: no se validan argumentos contra la firma
            node.type = INT

    def exitLvalue(self, node: Tree):
        shape = node.shape
        if not shape:
            return
        if len(shape) == 1:
            leaf = node.children[0]
            node.type = leaf.type = self._leaf_type(leaf)
        elif shape[0] == "LPAREN":
            node.type = node.child_type(1)
        elif shape[0] == "STAR":
            node.type = self._deref(node)

    # expr expr PLUS term | expr expr MINUS term
    def exitExpr(self, node: Tree):
        if len(node.children) != 3:
            return
        left, op, right = node.child_type(0), node.shape[1], node.child_type(2)
        if op == "PLUS":
            if is_pointer(left) or is_pointer(right):
                node.type = PTR
        elif op == "MINUS":
            if is_int(left) and is_pointer(right):
                self._error("E102", "cannot subtract pointer from int", node)
            if is_pointer(left):
                node.type = PTR

    # term term STAR factor | term term SLASH factor | term term PCT factor
    def exitTerm(self, node: Tree):
        if len(node.children) != 3 or node.shape[1] not in _MUL_OPS:
            return
        if is_pointer(node.child_type(0)) or is_pointer(node.child_type(2)):
            self._error("E102", f"operand must be int in {node.children[1].lexeme or node.shape[1]}", node)
            node.type = INT

    # ------------------------------ statements ------------------------------
    def exitStatement(self, node: Tree):
        shape = node.shape
        if shape[:3] == ("lvalue", "BECOMES", "expr"):
            left, right = node.child_type(0), node.child_type(2)
            if both_known(left, right) and left != right:
                self._error("E101", f"type mismatch: {left} = {right}", node)
        elif shape[:1] == ("PRINTLN",):
            t = node.child_type(2)
            if is_known(t) and t != INT:
                self._error("E102", f"println expects an int argument, got {t}", node)
        elif shape[:1] == ("DELETE",):
            t = node.child_type(3)
            if is_known(t) and t != PTR:
                self._error("E102", f"delete[] expects an int* argument, got {t}", node)
        # Un statement no tiene tipo propio
        node.type = UNSET

    # test expr OP expr
    def exitTest(self, node: Tree):
        if len(node.children) == 3:
            left, right = node.child_type(0), node.child_type(2)
            if both_known(left, right) and left != right:
                self._error("E101", f"type mismatch during comparison: {left} vs {right}", node)
        node.type = UNSET


# -----------------------------------------------------------------------------
# API pública
# -----------------------------------------------------------------------------

def check(tree: Tree, options: Optional[CheckerOptions] = None, diag: Optional[Diagnostics] = None) -> TypeChecker:
    return TypeChecker(options, diag).check(tree)

def analyze(tree: Tree, options: Optional[CheckerOptions] = None, diag: Optional[Diagnostics] = None) -> dict:
    """Punto de entrada estable usado por la CLI y la UI.
    Anota los tipos en `tree` y devuelve 'symbols', 'procedures' y 'errors'.
    Si se pasa `diag`, los errores se agregan a esa misma colección.
    """
    v = check(tree, options, diag)
    return {
        "symbols": v.symtab.dump(),
        "procedures": v.procedures.dump(),
        "errors": v.diag.to_list(),
    }
