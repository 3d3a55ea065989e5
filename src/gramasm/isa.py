'''
descriptor de ISA: gramáticas de instrucciones y de macros (pseudoinstrucciones)
'''

from __future__ import annotations
import json
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Tuple, Union

from .utils import WORD_BITS

Regex = Union[str, "re.Pattern[str]"]


class IsaError(ValueError):
    """Descriptor de ISA mal formado (se detecta al construirlo, nunca al ensamblar)."""


@dataclass(frozen=True)
class FieldSpec:
    """Campo de operando.

    - bits: ancho con signo; > 0 sin signo, < 0 complemento a dos de abs(bits)
    - index: posición del bit menos significativo en la palabra
    - branch: el valor simbólico se convierte en desplazamiento relativo
    """
    bits: int
    index: int
    branch: bool = False

    @property
    def width(self) -> int:
        return abs(self.bits)

    @property
    def signed(self) -> bool:
        return self.bits < 0


@dataclass(frozen=True)
class OpcodeField:
    """Patrón fijo que aporta toda instrucción de la gramática."""
    value: int
    index: int

    @property
    def width(self) -> int:
        return max(1, self.value.bit_length())


@dataclass(frozen=True)
class InstructionGrammar:
    name: str
    pattern: re.Pattern[str]
    fields: Tuple[FieldSpec, ...]
    opcodes: Tuple[OpcodeField, ...] = ()


@dataclass(frozen=True)
class MacroGrammar:
    name: str
    pattern: re.Pattern[str]
    templates: Tuple[str, ...]


def _compile(name: str, regex: Regex) -> re.Pattern[str]:
    if isinstance(regex, re.Pattern):
        return regex
    try:
        return re.compile(regex)
    except re.error as ex:
        raise IsaError(f"{name}: invalid regex {regex!r}: {ex}") from ex


def _check_layout(name: str, fields: Iterable[FieldSpec], opcodes: Iterable[OpcodeField]) -> None:
    """Todos los rangos de bits caben en la palabra y no se solapan."""
    spans: List[Tuple[int, int, str]] = []
    for i, f in enumerate(fields, start=1):
        if f.bits == 0:
            raise IsaError(f"{name}: field {i} has zero width")
        spans.append((f.index, f.index + f.width - 1, f"field {i}"))
    for i, op in enumerate(opcodes, start=1):
        if op.value < 0:
            raise IsaError(f"{name}: opcode {i} must not be negative")
        spans.append((op.index, op.index + op.width - 1, f"opcode {i}"))

    for lo, hi, what in spans:
        if lo < 0 or hi >= WORD_BITS:
            raise IsaError(f"{name}: {what} occupies bits [{lo}:{hi}], outside a {WORD_BITS}-bit word")
    spans.sort()
    for (lo_a, hi_a, a), (lo_b, hi_b, b) in zip(spans, spans[1:]):
        if lo_b <= hi_a:
            raise IsaError(f"{name}: {a} [{lo_a}:{hi_a}] overlaps {b} [{lo_b}:{hi_b}]")


def instruction(name: str, regex: Regex, fields: Iterable[FieldSpec],
                opcodes: Iterable[OpcodeField] = ()) -> InstructionGrammar:
    """Construye y valida una gramática de instrucción."""
    pattern = _compile(name, regex)
    fields = tuple(fields)
    opcodes = tuple(opcodes)
    if pattern.groups != len(fields):
        raise IsaError(f"{name}: regex has {pattern.groups} capture groups but {len(fields)} fields")
    _check_layout(name, fields, opcodes)
    return InstructionGrammar(name=name, pattern=pattern, fields=fields, opcodes=opcodes)


def macro(name: str, regex: Regex, templates: Iterable[str]) -> MacroGrammar:
    """Construye una gramática de macro; los placeholders se comprueban al expandir."""
    if isinstance(templates, str):
        raise IsaError(f"{name}: templates must be a list of lines, not a string")
    templates = tuple(templates)
    if not templates:
        raise IsaError(f"{name}: macro needs at least one template")
    for i, t in enumerate(templates, start=1):
        if not t.strip():
            raise IsaError(f"{name}: template {i} is blank")
    return MacroGrammar(name=name, pattern=_compile(name, regex), templates=templates)


@dataclass(frozen=True)
class ISADescriptor:
    """Tablas de gramáticas, inmutables durante toda llamada a ``process``."""
    instructions: Mapping[str, InstructionGrammar]
    macros: Mapping[str, MacroGrammar]

    @classmethod
    def build(cls, instructions: Iterable[InstructionGrammar] = (),
              macros: Iterable[MacroGrammar] = ()) -> "ISADescriptor":
        ins: dict = {}
        for g in instructions:
            if g.name in ins:
                raise IsaError(f"duplicate instruction grammar: {g.name}")
            ins[g.name] = g
        mac: dict = {}
        for g in macros:
            if g.name in mac:
                raise IsaError(f"duplicate macro grammar: {g.name}")
            mac[g.name] = g
        return cls(instructions=MappingProxyType(ins), macros=MappingProxyType(mac))

    def instruction(self, mnemonic: str) -> InstructionGrammar:
        """Devuelve la gramática de una instrucción por mnemónico."""
        if mnemonic not in self.instructions:
            raise KeyError(f"unknown instruction: {mnemonic}")
        return self.instructions[mnemonic]

    def is_macro(self, mnemonic: str) -> bool:
        return mnemonic in self.macros


# ---- Carga desde JSON ----

def _require(obj: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in obj:
        raise IsaError(f"{where}: missing key '{key}'")
    return obj[key]


def isa_from_dict(obj: Mapping[str, Any]) -> ISADescriptor:
    """
    Construye el descriptor a partir de un objeto con la forma:

        {"instructions": [{"name", "regex",
                           "fields": [{"bits", "index", "branch"}],
                           "opcodes": [{"value", "index"}]}],
         "macros": [{"name", "regex", "templates": [...]}]}
    """
    if not isinstance(obj, Mapping):
        raise IsaError("ISA descriptor must be an object")
    grammars = []
    for i, raw in enumerate(obj.get("instructions", [])):
        where = f"instructions[{i}]"
        name = _require(raw, "name", where)
        try:
            fields = [FieldSpec(int(f["bits"]), int(f["index"]), bool(f.get("branch", False)))
                      for f in raw.get("fields", [])]
            opcodes = [OpcodeField(int(o["value"]), int(o["index"])) for o in raw.get("opcodes", [])]
        except (KeyError, TypeError, ValueError) as ex:
            raise IsaError(f"{where} ({name}): malformed field/opcode: {ex}") from ex
        grammars.append(instruction(name, _require(raw, "regex", where), fields, opcodes))
    macros = []
    for i, raw in enumerate(obj.get("macros", [])):
        where = f"macros[{i}]"
        macros.append(macro(_require(raw, "name", where), _require(raw, "regex", where),
                            _require(raw, "templates", where)))
    return ISADescriptor.build(grammars, macros)


def load_isa(path: str) -> ISADescriptor:
    """Lee un descriptor de ISA en JSON."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            obj = json.load(f)
        except json.JSONDecodeError as ex:
            raise IsaError(f"{path}: invalid JSON: {ex}") from ex
    return isa_from_dict(obj)
