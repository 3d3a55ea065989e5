import pytest
from src.gramasm.diagnostics import error, fatal, AssemblyError, Diagnostic

def test_error_str():
    d = error("value (40) exceeds max possible value determined by bits (31)", line=12, hint="unsigned field of 5 bits")
    s = str(d)
    assert s.startswith("12::value (40)")
    assert "(hint: unsigned field of 5 bits)" in s

def test_error_without_line():
    assert str(error("No instructions provided")) == "No instructions provided"

def test_fatal_carries_diagnostic():
    ex = fatal("invalid var name", line=3)
    assert isinstance(ex, AssemblyError)
    assert ex.diagnostic == Diagnostic("invalid var name", 3)
    assert str(ex) == "3::invalid var name"

def test_fatal_has_no_hint():
    assert fatal("No text section found").diagnostic.hint is None
    with pytest.raises(TypeError):
        fatal("No text section found", hint="x")
