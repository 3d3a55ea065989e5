'''
clase Diagnostic, helpers y errores fatales del ensamblador
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Diagnostic:
    """Estructura de un diagnóstico para reportar problemas.

    Lleva la línea de origen (1-based, opcional) y un mensaje de ayuda (pista)
    para orientar la corrección. Se representa como ``"<línea>::<mensaje>"``.
    """
    message: str
    line: Optional[int] = None
    hint: Optional[str] = None

    def __str__(self) -> str:
        core = self.message
        if self.hint:
            core += f"  (hint: {self.hint})"
        if self.line is None:
            return core
        return f"{self.line}::{core}"


class AssemblyError(Exception):
    """Error estructural: aborta la ejecución completa.

    Transporta un único Diagnostic; ``process`` lo convierte en un resultado fatal.
    """

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(str(diagnostic))
        self.diagnostic = diagnostic


def error(message: str, *, line: int | None = None, hint: str | None = None) -> Diagnostic:
    """Crea un diagnóstico de tipo error."""
    return Diagnostic(message, line, hint)


def fatal(message: str, *, line: int | None = None) -> AssemblyError:
    """Crea la excepción de un error estructural (para ``raise fatal(...)``)."""
    return AssemblyError(Diagnostic(message, line))
