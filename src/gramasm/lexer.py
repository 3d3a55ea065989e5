from __future__ import annotations
import re

COMMENT_CHAR = ";"

IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
LABEL_RE = re.compile(rf"^({IDENT}):\s*(.*)$")
DATA_LABEL_RE = re.compile(rf"^({IDENT}):$")

def strip_comment(line: str) -> str:
    """Remove a ';' comment up to end of line and surrounding whitespace."""
    return line.split(COMMENT_CHAR, 1)[0].strip()

def split_label(line: str):
    """Return (label, rest) if line has 'label:', else (None, line)."""
    m = LABEL_RE.match(line)
    if not m:
        return None, line
    return m.group(1), m.group(2).strip()

def data_label(token: str):
    """Return the variable name of a 'name:' token, or None if malformed."""
    m = DATA_LABEL_RE.match(token)
    return m.group(1) if m else None

def is_marker(line: str, marker: str) -> bool:
    return line.startswith(marker)

def split_mnemonic(line: str):
    """Return (mnemonic, rest). The rest keeps its leading whitespace so that
    grammar patterns see the operand text exactly as written."""
    s = line.strip()
    if not s:
        return "", ""
    mnemonic = s.split(None, 1)[0]
    return mnemonic, s[len(mnemonic):]
