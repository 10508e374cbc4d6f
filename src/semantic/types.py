# Tipos como strings simples; "" significa que el tipo no se pudo resolver
INT   = "int"
PTR   = "int*"
UNSET = ""

# Predicados
def is_int(t):
    return t == INT

def is_pointer(t):
    return t == PTR

def is_known(t):
    # Un tipo sin resolver no participa en más chequeos (evita errores en cascada)
    return t != UNSET

def both_known(a, b):
    return is_known(a) and is_known(b)

def type_from_clause(type_node):
    """
    Tipo declarado según la forma de la cláusula ``type``:
      type INT       -> int
      type INT STAR  -> int*
    """
    if type_node is None or not type_node.children:
        return UNSET
    return INT if len(type_node.children) == 1 else PTR
