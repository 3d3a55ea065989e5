import pytest
from src.gramasm.isa import ISADescriptor, FieldSpec, OpcodeField, instruction, macro

REG = r"R(\d+)"
SEP = r"\s*,\s*"

def toy_isa() -> ISADescriptor:
    """ISA de juguete de formato fijo: opcode de 6 bits en [26:31]."""
    return ISADescriptor.build(
        instructions=[
            instruction("ADD", rf"\s*{REG}{SEP}{REG}{SEP}{REG}",
                        [FieldSpec(5, 0), FieldSpec(5, 5), FieldSpec(5, 10)],
                        [OpcodeField(7, 26)]),
            instruction("ADDI", rf"\s*{REG}{SEP}{REG}{SEP}(\S+)",
                        [FieldSpec(5, 21), FieldSpec(5, 16), FieldSpec(-16, 0)],
                        [OpcodeField(8, 26)]),
            instruction("BEQ", rf"\s*{REG}{SEP}{REG}{SEP}(\w+)",
                        [FieldSpec(5, 21), FieldSpec(5, 16), FieldSpec(-16, 0, branch=True)],
                        [OpcodeField(4, 26)]),
            instruction("LW", rf"\s*{REG}{SEP}(\S+)",
                        [FieldSpec(5, 21), FieldSpec(16, 0)],
                        [OpcodeField(35, 26)]),
            instruction("J", r"\s*(\w+)", [FieldSpec(26, 0)], [OpcodeField(2, 26)]),
            instruction("NOP", r"^\s*$", []),
        ],
        macros=[
            macro("MOV", rf"\s*{REG}{SEP}{REG}", ["ADD R%1, R%2, R0"]),
            macro("LI3", rf"\s*{REG}{SEP}(\S+)",
                  ["ADDI R%1, R0, 0", "ADDI R%1, R%1, %2", "ADD R%1, R%1, R0"]),
        ],
    )

@pytest.fixture
def isa():
    return toy_isa()
