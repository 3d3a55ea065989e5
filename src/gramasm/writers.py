from __future__ import annotations
from typing import Iterable, List
from .utils import to_hex32, to_bin32

def to_hex_lines(words: Iterable[int]) -> List[str]:
    return [to_hex32(w) for w in words]

def to_bin_lines(words: Iterable[int]) -> List[str]:
    return [to_bin32(w) for w in words]

def write_lines(lines: Iterable[str], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")
