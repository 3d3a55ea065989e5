# src/gramasm/linker.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .ast import SourceLine, Instruction
from .lexer import data_label, split_label
from .utils import parse_int_literal, fits_word, DEC_LITERAL_RE, HEX_LITERAL_RE
from .diagnostics import Diagnostic, error, fatal

logger = logging.getLogger(__name__)

# ---------- Resultados del segmento de datos ----------

@dataclass(frozen=True)
class DataSegment:
    symbols: Dict[str, int]   # nombre -> índice de palabra
    memory: List[int]         # imagen inicial, en orden de declaración

# ---------- Helpers internos ----------

def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value

def _parse_word(value: str, line: int, diags: List[Diagnostic]) -> Optional[int]:
    # .word: hexadecimal con prefijo 0x/0X o decimal
    if value.lstrip("+-")[:2] in ("0x", "0X"):
        if not HEX_LITERAL_RE.match(value):
            diags.append(error("failed to parse hex word", line=line))
            return None
    elif not DEC_LITERAL_RE.match(value):
        diags.append(error("failed to parse decimal word", line=line))
        return None
    return parse_int_literal(value)

def _parse_int(value: str, line: int, diags: List[Diagnostic]) -> Optional[int]:
    # .int: sólo decimal
    if not DEC_LITERAL_RE.match(value):
        diags.append(error("failed to parse int", line=line))
        return None
    return int(value, 10)

def _parse_char(value: str, line: int, diags: List[Diagnostic]) -> Optional[List[int]]:
    value = _strip_quotes(value)
    if len(value) != 1:
        diags.append(error("failed to parse char, not a single char", line=line))
        return None
    return [ord(value)]

# ---------- Segmento de datos ----------

def build_data_segment(data_lines: Sequence[SourceLine], diags: List[Diagnostic]) -> DataSegment:
    """
    Asigna a cada símbolo el índice de memoria actual (direccionamiento por
    palabras) y construye la imagen de memoria de datos.

    Formato de línea: '<nombre>: <tipo> <valor>' con tipo .word/.int/.char/.string.
    Un nombre de variable inválido aborta toda la ejecución.
    """
    symbols: Dict[str, int] = {}
    memory: List[int] = []

    for l in data_lines:
        parts = l.text.split()
        if len(parts) != 3:
            diags.append(error("not valid data format", line=l.line,
                               hint="expected '<name>: <type> <value>'"))
            continue
        label, dtype, value = parts
        name = data_label(label)
        if name is None:
            raise fatal("invalid var name", line=l.line)
        if name in symbols:
            diags.append(error(f"Duplicate declaration of {name}", line=l.line))
            continue

        words: Optional[List[int]] = None
        if dtype == ".word":
            v = _parse_word(value, l.line, diags)
            words = None if v is None else [v]
        elif dtype == ".int":
            v = _parse_int(value, l.line, diags)
            words = None if v is None else [v]
        elif dtype == ".char":
            words = _parse_char(value, l.line, diags)
        elif dtype == ".string":
            # un carácter por palabra, sin prefijo de longitud ni terminador
            text = _strip_quotes(value)
            if not text:
                diags.append(error("empty string", line=l.line))
                continue
            words = [ord(c) for c in text]
        else:
            diags.append(error("unrecognized data type", line=l.line))
            continue
        if words is None:
            continue
        bad = [w for w in words if not fits_word(w)]
        if bad:
            diags.append(error(f"value ({bad[0]}) does not fit in 32 bits", line=l.line))
            continue

        symbols[name] = len(memory)
        memory.extend(words)

    logger.debug(f"data segment: {len(symbols)} symbols, {len(memory)} words")
    return DataSegment(symbols=symbols, memory=memory)

# ---------- Etiquetas (dos etapas) ----------

def extract_labels(
    text_lines: Sequence[SourceLine],
    diags: List[Diagnostic],
) -> Tuple[Dict[str, int], List[SourceLine]]:
    """
    Devuelve (etiqueta -> línea de origen, líneas sin prefijo de etiqueta).
    Las líneas que quedan vacías tras quitar la etiqueta se descartan.
    """
    labels: Dict[str, int] = {}
    out: List[SourceLine] = []
    for l in text_lines:
        label, rest = split_label(l.text)
        if label is not None:
            if label in labels:
                diags.append(error(f"Duplicate label {label}", line=l.line))
            else:
                labels[label] = l.line
            l = l.with_text(rest)
        if l.text:
            out.append(l)
    return labels, out

def resolve_labels(
    label_lines: Dict[str, int],
    instructions: Sequence[Instruction],
    diags: List[Diagnostic],
) -> Dict[str, int]:
    """
    Etiqueta -> índice de la primera instrucción expandida cuya línea de origen
    es >= la línea de la etiqueta. Así una etiqueta ante una pseudoinstrucción
    apunta a la primera instrucción real de su expansión.
    """
    resolved: Dict[str, int] = {}
    for name, line in label_lines.items():
        target = next((ins.index for ins in instructions if ins.line >= line), None)
        if target is None:
            diags.append(error(f"label {name} does not precede any instruction", line=line))
            continue
        resolved[name] = target
    logger.debug(f"labels resolved: {resolved}")
    return resolved
