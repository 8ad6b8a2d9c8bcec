import pytest

from gradecore import EngineConfig
from gradecore.cells import (
    Numeric, Fraction, Withdrawn, Absent, Label,
    interpret, raw_value, max_value, display, grade_to_dict, grade_from_dict,
)


@pytest.mark.parametrize("cell", [None, "", "   ", "NP", "np", " Np "])
def test_absent(cell):
    assert interpret(cell) == Absent()


@pytest.mark.parametrize("cell", ["RM", "rm", "  Rm"])
def test_withdrawn(cell):
    assert interpret(cell) == Withdrawn()


@pytest.mark.parametrize("cell, expected", [
    ("9/10", Fraction(9.0, 10.0)),
    (" 7.5 / 20 ", Fraction(7.5, 20.0)),
    ("3,5/5", Fraction(3.5, 5.0)),
    ("0/0", Fraction(0.0, 0.0)),
])
def test_fraction(cell, expected):
    assert interpret(cell) == expected


@pytest.mark.parametrize("cell, expected", [
    ("abc/10", Fraction(0.0, 10.0)),
    ("7/x", Fraction(7.0, 1.0)),
    ("/", Fraction(0.0, 1.0)),
])
def test_fraction_falls_back_to_defaults(cell, expected):
    assert interpret(cell) == expected


@pytest.mark.parametrize("cell, expected", [
    ("8.5", 8.5),
    ("7,5", 7.5),
    ("-3", -3.0),
    ("+4", 4.0),
    (" 100 ", 100.0),
    (".5", 0.5),
])
def test_numeric(cell, expected):
    assert interpret(cell) == Numeric(expected)


@pytest.mark.parametrize("cell, expected", [
    ("pendiente", "PENDIENTE"),
    ("A+", "A+"),
    ("1/2/3", "1/2/3"),
    ("nan", "NAN"),
    ("inf", "INF"),
    ("1e3", "1E3"),
    ("  aprobado ", "APROBADO"),
])
def test_label(cell, expected):
    assert interpret(cell) == Label(expected)


def test_custom_codes():
    assert interpret("AUS", absent_codes=("AUS",)) == Absent()
    assert interpret("NP", absent_codes=("AUS",)) == Label("NP")
    assert interpret("ret", withdrawn_codes=("RET",)) == Withdrawn()


@pytest.mark.parametrize("cell", [
    None, "", "/", "//", "1//2", "a/b", "NP/RM", "--", "½", "🙂", "9 / 10 / 11", "\t", "0x10", "1_000",
])
def test_interpret_is_total(cell):
    assert isinstance(interpret(cell), (Numeric, Fraction, Withdrawn, Absent, Label))


def test_raw_and_max_values():
    assert raw_value(Numeric(4.0)) == 4.0
    assert raw_value(Fraction(3.0, 5.0)) == 3.0
    assert raw_value(Absent()) is None
    assert raw_value(Withdrawn()) is None
    assert raw_value(Label("X")) is None

    assert max_value(Fraction(3.0, 5.0)) == 5.0
    assert max_value(Fraction(0.0, 0.0)) is None
    assert max_value(Numeric(5.0)) is None


def test_display():
    assert display(Fraction(9.0, 10.0)) == "9/10"
    assert display(Numeric(7.5)) == "7.5"
    assert display(Absent()) == ""
    assert display(Label("A+")) == "A+"


def test_tagged_dict_form():
    assert grade_to_dict(Fraction(9.0, 10.0)) == {"status": "Fraction", "value": {"obtained": 9.0, "total": 10.0}}
    assert grade_to_dict(Absent()) == {"status": "Absent"}
    assert grade_from_dict({"status": "Label", "value": "A+"}) == Label("A+")
    with pytest.raises(ValueError):
        grade_from_dict({"status": "Bogus"})


@pytest.mark.parametrize("cell", ["9" * 400, "-" + "9" * 400])
def test_overflowing_numeral_is_a_label(cell):
    assert interpret(cell) == Label(cell)


def test_overflowing_fraction_side_falls_back():
    assert interpret("9" * 400 + "/10") == Fraction(0.0, 10.0)


@pytest.mark.parametrize("cell, expected", [
    ("1,000", Label("1,000")),
    ("12,345", Label("12,345")),
    ("7,", Numeric(7.0)),
    (",5", Numeric(0.5)),
    ("1.000", Numeric(1.0)),
])
def test_comma_takes_at_most_two_decimals(cell, expected):
    assert interpret(cell) == expected


def test_default_codes_match_config():
    cfg = EngineConfig()
    for code in cfg.absent_codes:
        assert interpret(code) == Absent()
    for code in cfg.withdrawn_codes:
        assert interpret(code) == Withdrawn()
