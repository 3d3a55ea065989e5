'''
 bit-twiddling (u32, sign_extend, campos de bits, formatos de salida)
'''

from __future__ import annotations
import re
from typing import Optional, Tuple

# Máscara para 32 bits sin signo
U32_MASK = 0xFFFFFFFF
WORD_BITS = 32

HEX_LITERAL_RE = re.compile(r"^[+-]?0[xX][0-9a-fA-F]+$")
DEC_LITERAL_RE = re.compile(r"^[+-]?\d+$")

def u32(x: int) -> int:
    """Fuerza el valor al rango de 32 bits sin signo."""
    return x & U32_MASK

def mask(bits: int) -> int:
    """Máscara de 'bits' unos."""
    if bits <= 0:
        raise ValueError("bits debe ser positivo")
    return (1 << bits) - 1

def sign_extend(x: int, bits: int) -> int:
    """Extiende el signo de x, asumiendo que cabe en 'bits' bits (complemento a dos)."""
    x &= mask(bits)
    sign_bit = 1 << (bits - 1)
    return (x ^ sign_bit) - sign_bit

def field_bounds(bits: int) -> Tuple[int, int]:
    """Rango (lo, hi) inclusivo de un campo.

    Ancho positivo: sin signo de 'bits' bits. Ancho negativo: con signo
    (complemento a dos) de abs(bits) bits.
    """
    if bits == 0:
        raise ValueError("el ancho de un campo no puede ser 0")
    if bits > 0:
        return 0, (1 << bits) - 1
    n = -bits
    return -(1 << (n - 1)), (1 << (n - 1)) - 1

def pack_field(value: int, bits: int, index: int) -> int:
    """Trunca value al ancho del campo y lo desplaza a su posición."""
    return (value & mask(abs(bits))) << index

def extract_field(word: int, bits: int, index: int) -> int:
    """Inversa de pack_field: lee el campo y reinterpreta el signo si bits < 0."""
    raw = (word >> index) & mask(abs(bits))
    if bits < 0:
        return sign_extend(raw, -bits)
    return raw

def parse_int_literal(token: str) -> Optional[int]:
    """Entero decimal o hexadecimal (0x/0X), con signo opcional; None si no lo es."""
    t = token.strip()
    if HEX_LITERAL_RE.match(t):
        sign = -1 if t.startswith("-") else 1
        return sign * int(t.lstrip("+-")[2:], 16)
    if DEC_LITERAL_RE.match(t):
        return int(t, 10)
    return None

def fits_word(x: int) -> bool:
    """Cabe en una palabra de 32 bits, interpretada con o sin signo."""
    return -(1 << (WORD_BITS - 1)) <= x <= U32_MASK

def to_bin32(x: int) -> str:
    """Representación binaria de 32 bits (cadena)."""
    return format(u32(x), "032b")

def to_hex32(x: int, *, prefix: bool = True) -> str:
    """Representación hexadecimal de 32 bits (cadena), con o sin prefijo 0x."""
    s = format(u32(x), "08x")
    return ("0x" + s) if prefix else s
