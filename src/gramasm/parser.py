# src/gramasm/parser.py
from __future__ import annotations
import logging
from typing import List, Sequence, Tuple

from .lexer import strip_comment, is_marker
from .ast import SourceLine
from .diagnostics import Diagnostic, error, fatal

logger = logging.getLogger(__name__)

TEXT_MARKER = ".text"
DATA_MARKER = ".data"

def preprocess(raw_lines: Sequence[str]) -> List[SourceLine]:
    """
    Quita comentarios (';' hasta fin de línea), espacios y líneas vacías.
    Conserva la numeración original (1-based), sin renumerar tras borrar.

    Una entrada vacía es un error estructural.
    """
    if len(raw_lines) == 0:
        raise fatal("No instructions provided")
    out: List[SourceLine] = []
    for lineno, raw in enumerate(raw_lines, start=1):
        core = strip_comment(raw)
        if core:
            out.append(SourceLine(line=lineno, text=core))
    logger.debug(f"preprocess: {len(raw_lines)} raw lines -> {len(out)} significant")
    return out

def split_sections(
    lines: Sequence[SourceLine],
    diags: List[Diagnostic],
) -> Tuple[List[SourceLine], List[SourceLine]]:
    """
    Devuelve (text_lines, data_lines), sin las cabeceras.

    Reglas:
      - Se toma la primera línea que empieza por '.text' y por '.data'.
      - Una segunda aparición de cualquiera es error semántico (se acumula en
        diags y la línea no entra en ninguna partición).
      - Falta de alguna sección, fichero que no empieza por una cabecera o
        sección .text vacía: error estructural.
    """
    text_begin = -1
    data_begin = -1
    repeated = set()

    for i, l in enumerate(lines):
        if is_marker(l.text, TEXT_MARKER):
            if text_begin == -1:
                text_begin = i
            else:
                diags.append(error(f"More than one occurrence of {TEXT_MARKER}", line=l.line))
                repeated.add(i)
        elif is_marker(l.text, DATA_MARKER):
            if data_begin == -1:
                data_begin = i
            else:
                diags.append(error(f"More than one occurrence of {DATA_MARKER}", line=l.line))
                repeated.add(i)

    if data_begin == -1:
        raise fatal("No data section found")
    if text_begin == -1:
        raise fatal("No text section found")

    def _block(start: int, end: int) -> List[SourceLine]:
        return [lines[i] for i in range(start, end) if i not in repeated]

    if text_begin == 0:
        text_lines = _block(1, data_begin)
        data_lines = _block(data_begin + 1, len(lines))
    elif data_begin == 0:
        data_lines = _block(1, text_begin)
        text_lines = _block(text_begin + 1, len(lines))
    else:
        first = lines[0]
        raise fatal(f"File must begin with {TEXT_MARKER} or {DATA_MARKER}", line=first.line)

    if not text_lines:
        raise fatal("no instructions found")
    logger.debug(f"sections: {len(text_lines)} text lines, {len(data_lines)} data lines")
    return text_lines, data_lines
