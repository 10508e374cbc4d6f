# src/cli.py
import sys
from parsing import build_from_file, build_from_lines, print_tree
from semantic import analyze, CheckerOptions, Diagnostics

USAGE = "Uso: python -m cli [--check-returns] [--symbols] [archivo]"

def read_derivation(path=None):
    """
    Reconstruye el árbol a partir de la derivación serializada.

    Si no se indica archivo, se lee la entrada estándar completa antes de
    construir el árbol.

    Returns:
        (BuildResult, Diagnostics): resultado de la reconstrucción y la colección
        de diagnósticos compartida con el análisis semántico.
    """
    diag = Diagnostics()
    if path:
        result = build_from_file(path, diag=diag)
    else:
        result = build_from_lines(sys.stdin.read().splitlines(), diag=diag)
    return result, diag

def print_tables(analysis_result, out=None):
    out = out or sys.stderr
    print("=== Tabla de Procedimientos ===", file=out)
    for proc in analysis_result["procedures"]:
        params = ", ".join(proc["params"]) or "None"
        print(f"Procedure Name: {proc['name']} | Argument Types: {params}", file=out)
    print("=== Tabla de Símbolos ===", file=out)
    for scope in analysis_result["symbols"]:
        for entry in scope["entries"]:
            print(f"[{scope['scope']}] Variable: {entry['name']}, Type: {entry['type']}", file=out)

def execute_cli(argv=None):
    """
    Función principal de la interfaz de línea de comandos.

    1. Leer la derivación (archivo o stdin).
    2. Reconstruir el árbol; si la primera línea no es válida, solo se reportan errores.
    3. Anotar tipos y recolectar diagnósticos.
    4. Imprimir el árbol anotado en stdout y los errores en stderr.

    El código de salida es siempre 0: los errores se comunican solo por stderr.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if "-h" in args or "--help" in args:
        print(USAGE)
        return 0

    options = CheckerOptions(check_returns="--check-returns" in args)
    show_tables = "--symbols" in args
    positional = [a for a in args if not a.startswith("--")]
    if len(positional) > 1:
        print(USAGE, file=sys.stderr)
        return 1

    result, diag = read_derivation(positional[0] if positional else None)
    analysis_result = None
    if result.tree is not None:
        analysis_result = analyze(result.tree, options, diag)
        print_tree(result.tree, sys.stdout)

    for line in diag.render():
        print(line, file=sys.stderr)

    if show_tables and analysis_result is not None:
        print_tables(analysis_result)
    return 0

def main():
    sys.exit(execute_cli())

if __name__ == "__main__":
    main()  # Ejecutar la función principal cuando se ejecuta el archivo
