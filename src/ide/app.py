from __future__ import annotations
import sys
import contextlib
from pathlib import Path
from typing import Any

import streamlit as st

# --- Rutas/paths base ---
# Estructura esperada:
# repo_root/
#   ├─ src/
#   │   ├─ ide/app.py (este archivo)
#   │   ├─ parsing/
#   │   ├─ semantic/
#   │   └─ tests/
#   └─ samples/

SRC_DIR = Path(__file__).resolve().parents[1]  # .../repo/src
REPO_ROOT = SRC_DIR.parent                     # .../repo

# Garantiza que los paquetes bajo src/ sean importables con `streamlit run src/ide/app.py`
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from parsing import build_from_text, format_tree, Tree  # noqa: E402
from semantic import analyze, CheckerOptions, Diagnostics  # noqa: E402


# ------------------ Utilidades núcleo ------------------
@st.cache_data(show_spinner=False)
def discover_samples() -> dict[str, str]:
    """Escanea el directorio de ejemplos y devuelve {ruta_visible: contenido}."""
    out: dict[str, str] = {}
    root = REPO_ROOT / "samples"
    if not root.exists():
        return out
    for p in sorted(root.glob("*")):
        if p.is_file() and p.suffix.lower() in {".wlp4i", ".txt"}:
            with contextlib.suppress(OSError, UnicodeDecodeError):
                out[f"{root.name}/{p.name}"] = p.read_text(encoding="utf-8")
    return out


def normalize_symbol_table(payload: Any) -> list[dict[str, str]]:
    """Aplana la tabla de símbolos devuelta por el checker a filas tabulares."""
    rows: list[dict[str, str]] = []
    for sc in payload or []:
        for e in sc.get("entries", []):
            rows.append({"scope": sc.get("scope", ""), "name": e.get("name", ""), "type": e.get("type", "")})
    return rows


def to_dot_graph(tree: Tree) -> str:
    """Convierte el árbol anotado a DOT para visualizar con Graphviz en Streamlit."""
    seq = 0
    lines = [
        "digraph G {",
        'node [shape=box, fontsize=10, fontname="Consolas"];',
        'graph [bgcolor="transparent"];',
        'edge  [color="#7f7f7f"];',
    ]

    def new_id() -> str:
        nonlocal seq
        seq += 1
        return f"n{seq}"

    def label(node: Tree) -> str:
        txt = f"{node.rule} {node.lexeme}" if node.is_terminal else node.rule
        if node.type:
            txt += f" : {node.type}"
        return '"' + txt.replace("\\", "\\\\").replace('"', '\\"') + '"'

    # Pila de (nodo, id del padre); el árbol puede ser muy profundo
    stack: list[tuple[Tree, str | None]] = [(tree, None)]
    while stack:
        node, parent = stack.pop()
        me = new_id()
        color = "#d7ba7d" if node.is_terminal else "#5aa9e6"
        shape = "ellipse" if node.is_terminal else "box"
        lines.append(f'{me} [label={label(node)}, color="{color}", shape={shape}];')
        if parent is not None:
            lines.append(f"{parent} -> {me};")
        stack.extend((ch, me) for ch in reversed(node.children))

    lines.append("}")
    return "\n".join(lines)


def run_pipeline(text: str, check_returns: bool) -> dict[str, Any]:
    diag = Diagnostics()
    result = build_from_text(text, diag=diag)
    sem = None
    if result.tree is not None:
        sem = analyze(result.tree, CheckerOptions(check_returns=check_returns), diag)
    return {
        "tree": result.tree,
        "annotated": format_tree(result.tree) if result.tree is not None else [],
        "semantic": sem,
        "errors": diag.to_list(),
        "rendered": diag.render(),
    }


# ------------------ Estado y configuración ------------------
DEFAULT_SNIPPET = (
    "start BOF procedures EOF\n"
    "BOF BOF\n"
    "procedures main\n"
    "main INT WAIN LPAREN dcl COMMA dcl RPAREN LBRACE dcls statements RETURN expr SEMI RBRACE\n"
    "INT int\nWAIN wain\nLPAREN (\n"
    "dcl type ID\ntype INT\nINT int\nID a\n"
    "COMMA ,\n"
    "dcl type ID\ntype INT\nINT int\nID b\n"
    "RPAREN )\nLBRACE {\n"
    "dcls .EMPTY\nstatements .EMPTY\n"
    "RETURN return\n"
    "expr term\nterm factor\nfactor ID\nID a\n"
    "SEMI ;\nRBRACE }\n"
    "EOF EOF\n"
)

st.set_page_config(page_title="WLP4 Type Checker", layout="wide")
st.title("WLP4 Type Checker")

st.session_state.setdefault("code", DEFAULT_SNIPPET)
st.session_state.setdefault("console", "")
st.session_state.setdefault("last_result", None)

with st.sidebar:
    st.header("Entrada")
    uploaded = st.file_uploader("Cargar derivación", type=["wlp4i", "txt"])
    if uploaded is not None and st.session_state.get("uploaded_name") != uploaded.name:
        st.session_state.code = uploaded.getvalue().decode("utf-8", errors="replace")
        st.session_state.console += f"📄 Cargado: {uploaded.name}\n"
        st.session_state["uploaded_name"] = uploaded.name

    samples = discover_samples()
    if samples:
        choice = st.selectbox("Ejemplos", ["—"] + list(samples))
        if choice != "—" and st.session_state.get("_example_name") != choice:
            st.session_state.code = samples[choice]
            st.session_state.console += f"📦 Ejemplo cargado: {choice}\n"
            st.session_state["_example_name"] = choice

    check_returns = st.checkbox("Exigir return de tipo int", value=False)

code = st.text_area("Derivación serializada", value=st.session_state.code, height=320)
st.session_state.code = code

col1, col2, _ = st.columns([1, 1, 6])
run_now = col1.button("▶ Analizar")
if col2.button("🧹 Limpiar consola"):
    st.session_state.console = ""

if run_now:
    res = run_pipeline(st.session_state.code, check_returns)
    st.session_state.last_result = res
    if res["tree"] is None:
        st.session_state.console += "❌ La derivación no empieza con 'start'.\n"
    elif res["errors"]:
        st.session_state.console += f"⚠️ Errores: {len(res['errors'])}\n"
    else:
        st.session_state.console += "✅ Análisis semántico sin errores.\n"

st.code(st.session_state.console or "// La salida aparecerá aquí...", language="bash")

res = st.session_state.last_result
if res:
    tabs = st.tabs(["Árbol anotado", "Errores", "Símbolos", "Grafo"])
    with tabs[0]:
        st.code("\n".join(res["annotated"]) or "// Sin árbol", language="text")
    with tabs[1]:
        if res["errors"]:
            st.code("\n".join(res["rendered"]), language="text")
            st.dataframe(
                [{"phase": e["phase"], "code": e["code"], "message": e["message"], "index": e["index"]}
                 for e in res["errors"]],
                use_container_width=True,
            )
        else:
            st.success("✅ Sin errores reportados.")
    with tabs[2]:
        sem = res["semantic"] or {}
        st.subheader("Procedimientos")
        procs = [{"name": p["name"], "params": ", ".join(p["params"])} for p in sem.get("procedures", [])]
        if procs:
            st.dataframe(procs, use_container_width=True)
        else:
            st.info("Sin procedimientos registrados (wain no se registra).")
        st.subheader("Variables")
        rows = normalize_symbol_table(sem.get("symbols"))
        if rows:
            st.dataframe(rows, use_container_width=True)
    with tabs[3]:
        if res["tree"] is not None:
            st.graphviz_chart(to_dot_graph(res["tree"]))
