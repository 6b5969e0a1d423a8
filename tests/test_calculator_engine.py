import pytest

from calculator_engine import CalculatorEngine


def _type(engine, text):
    """Teclea una expresión como ``"12 + 3"`` sobre el motor."""
    for field in text.split(" "):
        if field in ("+", "-", "*", "/"):
            engine.add_operator(f" {field} ")
        else:
            for ch in field:
                engine.add_digit(ch)
    return engine


@pytest.fixture
def engine():
    return CalculatorEngine()


def test_initial_state(engine):
    assert engine.get_expr() == ""
    assert engine.just_evaluated


def test_add_digit_builds_numeral(engine):
    assert engine.add_digit("1")
    assert engine.add_digit(".")
    assert engine.add_digit("5")
    assert engine.get_expr() == "1.5"
    assert not engine.just_evaluated


@pytest.mark.parametrize("token", ["a", "12", "", "+", None])
def test_add_digit_rejects_invalid_tokens(engine, token):
    assert not engine.add_digit(token)
    assert engine.get_expr() == ""
    assert engine.just_evaluated


def test_add_digit_rejects_second_decimal_point(engine):
    _type(engine, "1.")
    assert not engine.add_digit(".")
    engine.add_digit("5")
    assert not engine.add_digit(".")
    assert engine.get_expr() == "1.5"


def test_decimal_point_allowed_in_next_numeral(engine):
    _type(engine, "1.5 +")
    assert engine.add_digit(".")
    assert engine.get_expr() == "1.5 + ."


def test_add_digit_length_limit(engine):
    for _ in range(24):
        assert engine.add_digit("9")
    assert len(engine.get_expr()) == 24
    assert not engine.add_digit("9")
    assert len(engine.get_expr()) == 24


def test_length_limit_counts_operator_padding(engine):
    _type(engine, "1234567890 + 123456789")
    assert len(engine.get_expr()) == 22
    assert engine.add_digit("1")
    assert engine.add_digit("2")
    assert not engine.add_digit("3")


def test_add_operator_appends_padded(engine):
    engine.add_digit("5")
    assert engine.add_operator(" + ")
    assert engine.get_expr() == "5 + "


def test_add_operator_replaces_trailing_operator(engine):
    _type(engine, "5 +")
    assert engine.add_operator(" * ")
    assert engine.get_expr() == "5 * "


def test_add_operator_accepts_display_symbols(engine):
    engine.add_digit("6")
    assert engine.add_operator(" ÷ ")
    assert engine.get_expr() == "6 / "


def test_add_operator_on_empty_buffer_is_noop(engine):
    assert not engine.add_operator(" + ")
    assert engine.get_expr() == ""
    assert engine.just_evaluated


def test_add_operator_rejects_unknown_operator(engine):
    engine.add_digit("5")
    assert not engine.add_operator(" ^ ")
    assert engine.get_expr() == "5"


def test_add_operator_continues_from_result(engine):
    _type(engine, "2 + 2")
    engine.evaluate()
    assert engine.add_operator(" * ")
    assert engine.get_expr() == "4 * "
    assert not engine.just_evaluated


def test_toggle_sign_is_an_involution(engine):
    engine.add_digit("7")
    assert engine.toggle_sign()
    assert engine.get_expr() == "-7"
    assert engine.toggle_sign()
    assert engine.get_expr() == "7"


def test_toggle_sign_only_touches_trailing_numeral(engine):
    _type(engine, "5 + 3")
    engine.toggle_sign()
    assert engine.get_expr() == "5 + -3"
    engine.evaluate()
    assert engine.get_expr() == "2"


def test_toggle_sign_on_zero(engine):
    engine.add_digit("0")
    engine.toggle_sign()
    assert engine.get_expr() == "0"


def test_toggle_sign_noop_cases(engine):
    assert not engine.toggle_sign()
    _type(engine, "5 +")
    assert not engine.toggle_sign()
    assert engine.get_expr() == "5 + "


def test_percentage(engine):
    _type(engine, "50 + 7")
    assert engine.percentage()
    assert engine.get_expr() == "50 + 0.07"


def test_percentage_noop_on_trailing_operator(engine):
    _type(engine, "50 *")
    assert not engine.percentage()
    assert engine.get_expr() == "50 * "


def test_evaluate_respects_precedence(engine):
    _type(engine, "2 + 3 * 4")
    assert engine.evaluate()
    assert engine.get_expr() == "14"
    assert engine.just_evaluated


def test_evaluate_left_associative(engine):
    _type(engine, "8 - 3 - 2")
    engine.evaluate()
    assert engine.get_expr() == "3"


def test_evaluate_rounds_to_seven_decimals(engine):
    _type(engine, "1 / 3")
    engine.evaluate()
    assert engine.get_expr() == "0.3333333"


def test_evaluate_tiny_result_rounds_to_zero(engine):
    _type(engine, "1 / 300000000")
    engine.evaluate()
    assert engine.get_expr() == "0"


def test_evaluate_switches_to_scientific(engine):
    _type(engine, "123456789 * 10")
    engine.evaluate()
    assert engine.get_expr() == "1.23457e+9"


def test_evaluate_negative_large_result_uses_scientific(engine):
    _type(engine, "0 - 123456789 * 10")
    engine.evaluate()
    assert engine.get_expr() == "-1.23457e+9"


def test_evaluate_scientific_mantissa_rounds_ties_up(engine):
    _type(engine, "1234565 * 1000")
    engine.evaluate()
    assert engine.get_expr() == "1.23457e+9"


def test_evaluate_smallest_rounded_result_is_scientific(engine):
    _type(engine, "1 / 10000000")
    engine.evaluate()
    assert engine.get_expr() == "1e-7"


def test_percentage_below_plain_range_is_scientific(engine):
    _type(engine, "0.00005")
    engine.percentage()
    assert engine.get_expr() == "5e-7"


def test_evaluate_at_threshold_stays_plain(engine):
    _type(engine, "999999999 * 1")
    engine.evaluate()
    assert engine.get_expr() == "999999999"


def test_evaluate_division_by_zero(engine):
    _type(engine, "5 / 0")
    assert engine.evaluate()
    assert engine.get_expr() == "∞"
    assert engine.just_evaluated


def test_digit_after_evaluate_starts_fresh(engine):
    _type(engine, "2 + 2")
    engine.evaluate()
    assert engine.add_digit("9")
    assert engine.get_expr() == "9"
    assert not engine.just_evaluated


@pytest.mark.parametrize("text", ["", "5 +"])
def test_evaluate_noop_leaves_state_unchanged(engine, text):
    _type(engine, text)
    before = (engine.get_expr(), engine.just_evaluated)
    assert not engine.evaluate()
    assert (engine.get_expr(), engine.just_evaluated) == before


def test_evaluate_noop_on_incomplete_numeral(engine):
    _type(engine, "5 + 3")
    engine.delete_last()
    engine.add_digit(".")
    assert not engine.evaluate()
    assert engine.get_expr() == "5 + ."


def test_delete_last_removes_operator_unit(engine):
    _type(engine, "12 +")
    assert engine.delete_last()
    assert engine.get_expr() == "12"


def test_delete_last_removes_one_character(engine):
    _type(engine, "12")
    assert engine.delete_last()
    assert engine.get_expr() == "1"


def test_delete_last_drops_emptied_numeral(engine):
    _type(engine, "12 + 3")
    engine.delete_last()
    assert engine.get_expr() == "12 + "
    engine.delete_last()
    assert engine.get_expr() == "12"


def test_delete_last_on_empty_buffer(engine):
    assert not engine.delete_last()


def test_clear_keeps_flag(engine):
    _type(engine, "12 + 3")
    assert engine.clear()
    assert engine.get_expr() == ""
    assert not engine.just_evaluated
    engine.add_digit("4")
    assert engine.get_expr() == "4"


def test_sessions_are_independent():
    first, second = CalculatorEngine(), CalculatorEngine()
    first.add_digit("1")
    assert second.get_expr() == ""


def test_custom_max_length():
    engine = CalculatorEngine(max_length=3)
    for ch in "1234":
        engine.add_digit(ch)
    assert engine.get_expr() == "123"


@pytest.mark.parametrize(
    "value, text",
    [
        (7.0, "7"),
        (-0.0, "0"),
        (0.07, "0.07"),
        (0.000001, "0.000001"),
        (1e-7, "1e-7"),
        (5e-7, "5e-7"),
        (1e21, "1e+21"),
        (float("nan"), "NaN"),
        (float("-inf"), "-∞"),
    ],
)
def test_format_number(value, text):
    assert CalculatorEngine._format_number(value) == text
