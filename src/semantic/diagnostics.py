from __future__ import annotations  # Permite la anotación de tipo en el mismo archivo antes de Python 3.10.
from dataclasses import dataclass, asdict, field  # Utiliza `dataclass` para crear clases con atributos fáciles de gestionar.
from typing import List, Dict, Any, Iterator, Optional

# Clase que representa un diagnóstico reportado durante la reconstrucción del árbol o el chequeo de tipos.
@dataclass
class Diagnostic:
    phase: str      # Fase en la que ocurrió el error: 'semantic' o 'syntax'
    code: str       # Código del error, por ejemplo, 'E001', 'E101', etc.
    message: str    # Descripción del error.
    index: Optional[int] = None  # Línea de la derivación (solo errores de reconstrucción).
    extra: Dict[str, Any] = field(default_factory=dict)  # Información adicional (nombre, tipos, ...).

    # Convierte el objeto `Diagnostic` en un diccionario. Útil para la serialización.
    def to_dict(self):
        return asdict(self)

    # Formato de salida: "ERROR: <mensaje>[ Index: <n>]"
    def render(self) -> str:
        where = f" Index: {self.index}" if self.index is not None and self.index >= 0 else ""
        return f"ERROR: {self.message}{where}"

    def __str__(self):
        return self.render()

# Colección de diagnósticos. Reemplaza la bandera global de error: quien la recibe decide si detenerse.
class Diagnostics:
    def __init__(self):
        self._items: List[Diagnostic] = []  # Lista que almacena todos los diagnósticos (errores).

    # Añade un nuevo diagnóstico a la lista.
    def add(self, *, phase: str, code: str, message: str, index: Optional[int] = None, **extra) -> Diagnostic:
        d = Diagnostic(phase=phase, code=code, message=message, index=index, extra=extra)
        self._items.append(d)
        return d

    # Devuelve `True` si no hay errores en la lista.
    def empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def messages(self) -> List[str]:
        return [d.message for d in self._items]

    # Devuelve todos los errores como una lista de diccionarios.
    def to_list(self) -> List[dict]:
        return [d.to_dict() for d in self._items]

    def render(self) -> List[str]:
        return [d.render() for d in self._items]
