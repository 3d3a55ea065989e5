from __future__ import annotations
import argparse, logging, sys
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple

from .parser import preprocess, split_sections
from .linker import build_data_segment, extract_labels, resolve_labels
from .pseudo import expand
from .encoding import encode
from .isa import ISADescriptor, IsaError, load_isa
from .diagnostics import AssemblyError, Diagnostic
from .writers import to_bin_lines, to_hex_lines, write_lines

logger = logging.getLogger(__name__)


def _empty_map() -> Mapping[str, int]:
    return MappingProxyType({})


@dataclass(frozen=True)
class AssemblyResult:
    """Resultado inmutable de una llamada a ``process``.

    Dos variantes: ``fatal`` fijado (error estructural, sin salida ni más
    diagnósticos) o una lista de diagnósticos acumulados, vacía si todo fue bien.
    Con errores, las palabras generadas no son un resultado válido.
    """
    instruction_words: Tuple[int, ...] = ()
    data_words: Tuple[int, ...] = ()
    symbols: Mapping[str, int] = field(default_factory=_empty_map)
    labels: Mapping[str, int] = field(default_factory=_empty_map)
    diagnostics: Tuple[Diagnostic, ...] = ()
    fatal: Optional[Diagnostic] = None

    @property
    def ok(self) -> bool:
        return self.fatal is None and not self.diagnostics

    @property
    def instructions(self) -> List[str]:
        """Memoria de instrucciones como cadenas binarias de 32 caracteres."""
        return to_bin_lines(self.instruction_words)

    @property
    def data(self) -> List[str]:
        """Memoria de datos como cadenas binarias de 32 caracteres."""
        return to_bin_lines(self.data_words)

    @property
    def messages(self) -> List[str]:
        """Diagnósticos en la forma '<línea>::<mensaje>'."""
        if self.fatal is not None:
            return [str(self.fatal)]
        return [str(d) for d in self.diagnostics]


def process(isa: ISADescriptor, lines: Sequence[str]) -> AssemblyResult:
    """Preprocesa, separa secciones, construye datos, expande macros,
    resuelve etiquetas y codifica. No guarda estado entre llamadas."""
    diags: List[Diagnostic] = []
    try:
        source = preprocess(lines)
        text_lines, data_lines = split_sections(source, diags)
        data = build_data_segment(data_lines, diags)
    except AssemblyError as ex:
        logger.debug(f"structural error: {ex.diagnostic}")
        return AssemblyResult(fatal=ex.diagnostic)

    label_lines, code = extract_labels(text_lines, diags)
    instructions = expand(code, isa, diags)
    labels = resolve_labels(label_lines, instructions, diags)
    enc = encode(instructions, isa, data.symbols, labels)
    diags.extend(enc.diagnostics)

    logger.debug(f"assembled {len(enc.words)} instructions, {len(data.memory)} data words, "
                 f"{len(diags)} diagnostics")
    return AssemblyResult(
        instruction_words=tuple(w.word for w in enc.words),
        data_words=tuple(data.memory),
        symbols=MappingProxyType(dict(data.symbols)),
        labels=MappingProxyType(labels),
        diagnostics=tuple(diags),
    )


def process_text(isa: ISADescriptor, text: str) -> AssemblyResult:
    return process(isa, text.splitlines())


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Table-driven assembler for grammar-described ISAs")
    ap.add_argument("isa", help="descriptor de ISA en JSON")
    ap.add_argument("source", help="archivo de entrada en ensamblador")
    ap.add_argument("out_text", help="salida: memoria de instrucciones")
    ap.add_argument("out_data", help="salida: memoria de datos")
    ap.add_argument("--hex", action="store_true", help="escribir palabras en hexadecimal en vez de binario")
    ap.add_argument("-v", "--verbose", action="store_true", help="trazas de depuración")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        isa = load_isa(args.isa)
    except (OSError, IsaError) as ex:
        print(f"ERROR: no pude cargar la ISA {args.isa}: {ex}", file=sys.stderr)
        return 2
    try:
        with open(args.source, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as ex:
        print(f"ERROR: no pude leer {args.source}: {ex}", file=sys.stderr)
        return 2

    result = process_text(isa, text)
    for msg in result.messages:
        print(msg, file=sys.stderr)
    if not result.ok:
        return 1

    fmt = to_hex_lines if args.hex else to_bin_lines
    try:
        write_lines(fmt(result.instruction_words), args.out_text)
        write_lines(fmt(result.data_words), args.out_data)
    except OSError as ex:
        print(f"ERROR al escribir salidas: {ex}", file=sys.stderr)
        return 3

    print(f"OK: {len(result.instruction_words)} instrucciones → {args.out_text}, "
          f"{len(result.data_words)} palabras de datos → {args.out_data}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
