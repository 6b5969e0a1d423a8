from calculator_engine import CalculatorEngine
from formula_evaluator import FormulaEvaluator, join_tokens
import logging
import sys


def _press(keys: list[str]) -> CalculatorEngine:
	"""Reproduce una secuencia de pulsaciones sobre un motor nuevo."""
	engine = CalculatorEngine()
	actions = {
		"+/-": engine.toggle_sign,
		"%": engine.percentage,
		"=": engine.evaluate,
		"DEL": engine.delete_last,
		"C": engine.clear,
	}
	for key in keys:
		if key in actions:
			actions[key]()
		elif key.strip() in "+-*/×÷−" and key.strip():
			engine.add_operator(key)
		else:
			engine.add_digit(key)
	return engine


def _keys_for(expr: str) -> list[str]:
	keys = []
	for field in expr.split(" "):
		if field in ("+", "-", "*", "/"):
			keys.append(f" {field} ")
		else:
			keys.extend(field)
	return keys


def inspect_expression(expr: str) -> None:
	"""Imprime los tokens, la forma postfija y el resultado formateado."""
	evaluator = FormulaEvaluator()
	tokens = evaluator.parse(expr)
	postfix = evaluator.to_postfix_tokens(tokens)
	value = evaluator.evaluate_postfix_tokens(postfix)
	engine = _press(_keys_for(expr) + ["="])

	print("Expression inspection")
	print(f"expr:      {expr}")
	print(f"tokens:    {[str(tok) for tok in tokens]}")
	print(f"postfix:   {join_tokens(postfix)}")
	print(f"raw value: {value!r}")
	print(f"display:   {engine.get_expr()}")


def run_regressions() -> bool:
	checks: list[tuple[str, bool]] = []
	expected_actual: list[tuple[str, str, str]] = []
	evaluator = FormulaEvaluator()

	expected_actual.append(("postfix 2 + 3 * 4", "2 3 4 * +", evaluator.to_postfix("2 + 3 * 4")))
	expected_actual.append(("postfix 8 - 3 - 2", "8 3 - 2 -", evaluator.to_postfix("8 - 3 - 2")))
	checks.append(("precedence 2 + 3 * 4 == 14", evaluator.calculate("2 + 3 * 4") == 14))
	checks.append(("left associativity 8 - 3 - 2 == 3", evaluator.calculate("8 - 3 - 2") == 3))
	checks.append(("zero is a numeral", evaluator.calculate("0 + 5") == 5))

	engine = _press(["5", " + ", " * "])
	expected_actual.append(("operator replacement", "5 * ", engine.get_expr()))

	engine = _press(["1"] * 30)
	checks.append(("digits stop at 24 characters", len(engine.get_expr()) == 24))

	engine = _press(["1", ".", "5", "."])
	expected_actual.append(("second decimal point rejected", "1.5", engine.get_expr()))

	engine = _press(["7", "+/-"])
	first = engine.get_expr()
	engine.toggle_sign()
	checks.append(("sign toggle is an involution", first == "-7" and engine.get_expr() == "7"))

	expected_actual.append(("1 / 3 rounds to 7 decimals", "0.3333333", _press(_keys_for("1 / 3") + ["="]).get_expr()))
	expected_actual.append((
		"large results switch to scientific",
		"1.23457e+9",
		_press(_keys_for("123456789 * 10") + ["="]).get_expr(),
	))
	expected_actual.append(("division by zero", "∞", _press(_keys_for("5 / 0") + ["="]).get_expr()))

	engine = _press(_keys_for("2 + 2") + ["=", "9"])
	expected_actual.append(("digit after evaluate starts fresh", "9", engine.get_expr()))

	expected_actual.append(("delete removes operator unit", "12", _press(["1", "2", " + ", "DEL"]).get_expr()))
	expected_actual.append(("delete removes one character", "1", _press(["1", "2", "DEL"]).get_expr()))

	engine = _press(["5", " + "])
	checks.append((
		"evaluate on trailing operator is a no-op",
		not engine.evaluate() and engine.get_expr() == "5 + " and not engine.just_evaluated,
	))

	failed = [name for name, ok in checks if not ok]
	failed += [label for label, expected, actual in expected_actual if expected != actual]
	for name, ok in checks:
		print(f"{name}: {'OK' if ok else 'FAIL'}")

	print("\nExpected vs Actual:")
	for label, expected, actual in expected_actual:
		status = "OK" if expected == actual else "FAIL"
		print(f"- {label}: {status}")
		print(f"  expected: {expected}")
		print(f"  actual:   {actual}")

	if failed:
		print("\nFAILED CHECKS:")
		for name in failed:
			print(f"- {name}")
		return False

	print("\nAll regression checks passed.")
	return True


if __name__ == "__main__":
	# Uso rápido:
	#   python regression_checks.py
	#   python regression_checks.py --inspect "2 + 3 * 4"
	#   python regression_checks.py --inspect "8 - 3 - 2" --verbose
	if "--verbose" in sys.argv:
		logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

	if "--inspect" in sys.argv:
		try:
			expr = sys.argv[sys.argv.index("--inspect") + 1]
		except (ValueError, IndexError):
			raise SystemExit("Missing expression after --inspect")
		inspect_expression(expr)
	elif not run_regressions():
		raise SystemExit(1)
