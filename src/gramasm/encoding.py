# src/gramasm/encoding.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .ast import Instruction
from .isa import ISADescriptor, InstructionGrammar, FieldSpec
from .lexer import split_mnemonic
from .utils import u32, field_bounds, pack_field, parse_int_literal
from .diagnostics import Diagnostic, error

logger = logging.getLogger(__name__)

# ---------------- Resultados de codificación ----------------

@dataclass(frozen=True)
class Encoded:
    word: int     # u32
    index: int    # posición en la memoria de instrucciones

@dataclass(frozen=True)
class EncodeResult:
    words: List[Encoded]
    diagnostics: List[Diagnostic]

# ---------------- Helpers semánticos ----------------

def _range_error(value: int, f: FieldSpec, *, line: int) -> Optional[Diagnostic]:
    lo, hi = field_bounds(f.bits)
    kind = "signed" if f.signed else "unsigned"
    if value > hi:
        return error(f"value ({value}) exceeds max possible value determined by bits ({hi})", line=line,
                     hint=f"{kind} field of {f.width} bits")
    if value < lo:
        if not f.signed:
            return error(f"value ({value}) of positive field cannot be negative (min {lo})", line=line)
        return error(f"value ({value}) is less than smallest possible value determined by bits ({lo})",
                     line=line, hint=f"{kind} field of {f.width} bits")
    return None

# ---------------- Codificador principal ----------------

def encode(
    instructions: Sequence[Instruction],
    isa: ISADescriptor,
    data_symbols: Dict[str, int],
    labels: Dict[str, int],
) -> EncodeResult:
    """
    Codifica cada instrucción expandida en una palabra de 32 bits.

    Una instrucción desconocida o que no casa con su gramática produce un error
    y una palabra 0 de relleno, de modo que words[i] corresponde siempre al
    índice de instrucción i.
    """
    diags: List[Diagnostic] = []
    words: List[Encoded] = []

    def _resolve(token: Optional[str], f: FieldSpec, ins: Instruction) -> int:
        # orden: literal -> símbolo de datos -> etiqueta
        if token is None:
            diags.append(error("missing operand", line=ins.line))
            return 0
        num = parse_int_literal(token)
        if num is not None:
            return num
        token = token.strip()
        if token in data_symbols:
            target = data_symbols[token]
        elif token in labels:
            target = labels[token]
        else:
            diags.append(error(f"non-numeric value not found in data: {token}", line=ins.line))
            return 0
        if f.branch:
            return target - ins.index - 1
        return target

    def _encode_one(ins: Instruction, g: InstructionGrammar, rest: str) -> int:
        m = g.pattern.search(rest)
        if not m:
            diags.append(error(f"regex failed to match for insn {g.name}", line=ins.line))
            return 0
        word = 0
        for f, token in zip(g.fields, m.groups()):
            value = _resolve(token, f, ins)
            problem = _range_error(value, f, line=ins.line)
            if problem is not None:
                diags.append(problem)
            word += pack_field(value, f.bits, f.index)
        word += sum(op.value << op.index for op in g.opcodes)
        return u32(word)

    for ins in instructions:
        mnem, rest = split_mnemonic(ins.text)
        try:
            g = isa.instruction(mnem)
        except KeyError:
            diags.append(error(f"unknown instruction: {mnem}", line=ins.line))
            word = 0
        else:
            word = _encode_one(ins, g, rest)
        words.append(Encoded(word=word, index=ins.index))

    logger.debug(f"encoded {len(words)} instructions, {len(diags)} problems")
    return EncodeResult(words=words, diagnostics=diags)
