'''
dataclases de las líneas intermedias del pipeline (SourceLine, Instruction)
'''

from __future__ import annotations
from dataclasses import dataclass

# ---- Registros a nivel de fuente ----

@dataclass(frozen=True)
class SourceLine:
    """Línea limpia (sin comentarios) con su número de línea original (1-based)."""
    line: int
    text: str

    def with_text(self, text: str) -> "SourceLine":
        return SourceLine(line=self.line, text=text)

# ---- Registros tras la expansión de pseudoinstrucciones ----

@dataclass(frozen=True)
class Instruction:
    """Instrucción real ya expandida.

    - line: línea de origen (procedencia para diagnósticos y etiquetas)
    - index: posición densa en la memoria de instrucciones (base 0)
    """
    line: int
    index: int
    text: str
