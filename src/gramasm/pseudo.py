from __future__ import annotations
import logging
import re
from typing import List, Optional, Sequence

from .ast import SourceLine, Instruction
from .isa import ISADescriptor, MacroGrammar
from .lexer import split_mnemonic
from .diagnostics import Diagnostic, error

logger = logging.getLogger(__name__)

# %N con N de uno o más dígitos; '%12' nunca se lee como '%1' seguido de '2'
PLACEHOLDER_RE = re.compile(r"%(\d+)")

class _MissingGroup(Exception):
    def __init__(self, number: int):
        super().__init__(number)
        self.number = number

def _substitute(template: str, groups: Sequence[Optional[str]]) -> str:
    def _group(m: re.Match) -> str:
        n = int(m.group(1))
        if n < 1 or n > len(groups):
            raise _MissingGroup(n)
        return groups[n - 1] or ""
    return PLACEHOLDER_RE.sub(_group, template)

def _expand_one(l: SourceLine, mg: MacroGrammar, rest: str, diags: List[Diagnostic]) -> List[SourceLine]:
    m = mg.pattern.search(rest)
    if not m:
        diags.append(error("pseudoinstruction expansion failed", line=l.line))
        return []
    try:
        return [l.with_text(_substitute(t, m.groups()).strip()) for t in mg.templates]
    except _MissingGroup as ex:
        diags.append(error(f"pseudoinstruction expansion failed: {mg.name} has no group %{ex.number}",
                           line=l.line))
        return []

def expand(lines: Sequence[SourceLine], isa: ISADescriptor, diags: List[Diagnostic]) -> List[Instruction]:
    """
    Reescribe las pseudoinstrucciones según sus plantillas (una sola pasada:
    lo generado no se vuelve a expandir) y numera las instrucciones resultantes
    con índices densos desde 0. Cada línea generada conserva la línea de origen.
    """
    out: List[SourceLine] = []
    for l in lines:
        mnemonic, rest = split_mnemonic(l.text)
        if isa.is_macro(mnemonic):
            out.extend(_expand_one(l, isa.macros[mnemonic], rest, diags))
        else:
            out.append(l)
    logger.debug(f"macro expansion: {len(lines)} lines -> {len(out)} instructions")
    return [Instruction(line=l.line, index=i, text=l.text) for i, l in enumerate(out)]
