"""
Máquina de estados de la calculadora básica.

Este módulo provee la clase CalculatorEngine que mantiene la expresión
en construcción y la edita a partir de las pulsaciones de la interfaz.
La interfaz gráfica queda fuera de este módulo: sólo necesita el
contrato siguiente.

Contrato de interfaz:
    - get_expr() -> str
    - add_digit(digit: str) -> bool
    - add_operator(operator: str) -> bool
    - toggle_sign() / percentage() / evaluate() -> bool
    - delete_last() / clear() -> bool
    - just_evaluated: propiedad de sólo lectura

Cada edición devuelve True si se aplicó y False si fue ignorada; una
pulsación inválida nunca lanza excepción ni altera el estado.
"""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal

from formula_evaluator import (
    ArithmeticProvider,
    FormulaEvaluator,
    Number,
    Operator,
    Token,
)

logger = logging.getLogger(__name__)


class CalculatorEngine:
    """Mantiene el búfer de la expresión y la evalúa bajo demanda."""

    DIGITS = "0123456789."
    MAX_EXPRESSION_LENGTH = 24
    ROUND_DECIMALS = 7
    SCI_NOTATION_THRESHOLD = 999_999_999
    SCI_FRACTION_DIGITS = 5
    PLAIN_NOTATION_RANGE = (1e-6, 1e21)

    def __init__(
        self,
        max_length: int = MAX_EXPRESSION_LENGTH,
        round_decimals: int = ROUND_DECIMALS,
        evaluator: FormulaEvaluator | None = None,
    ):
        self._evaluator = evaluator or FormulaEvaluator()
        self._max_length = max_length
        self._round_decimals = round_decimals

        self._tokens: list[Token] = []
        self._just_evaluated = True

    # ── Estado ───────────────────────────────────────────────────

    @property
    def just_evaluated(self) -> bool:
        return self._just_evaluated

    def get_expr(self) -> str:
        return self._render(self._tokens)

    @staticmethod
    def _render(tokens) -> str:
        return "".join(
            f" {tok} " if isinstance(tok, Operator) else tok.text for tok in tokens
        )

    def _ends_in_operator(self) -> bool:
        return bool(self._tokens) and isinstance(self._tokens[-1], Operator)

    def _trailing_number(self) -> Number | None:
        """Último numeral si está completo; None en otro caso."""
        if not self._tokens or self._ends_in_operator():
            return None
        last = self._tokens[-1]
        return last if last.is_complete else None

    @staticmethod
    def _reject(action: str, reason: str) -> bool:
        logger.debug("%s ignorado: %s", action, reason)
        return False

    # ── Edición ──────────────────────────────────────────────────

    def add_digit(self, digit: str) -> bool:
        if not isinstance(digit, str) or len(digit) != 1 or digit not in self.DIGITS:
            return self._reject("add_digit", f"entrada no válida {digit!r}")

        tokens = [] if self._just_evaluated else list(self._tokens)
        last = tokens[-1] if tokens else None

        if isinstance(last, Number):
            if not last.is_finite:
                return self._reject("add_digit", "numeral no finito")
            if digit == "." and "." in last.text:
                return self._reject("add_digit", "el numeral ya tiene punto decimal")
            tokens[-1] = Number(last.text + digit)
        else:
            tokens.append(Number(digit))

        if len(self._render(tokens)) > self._max_length:
            return self._reject("add_digit", "longitud máxima alcanzada")

        self._tokens = tokens
        self._just_evaluated = False
        return True

    def add_operator(self, operator: str) -> bool:
        symbol = None
        if isinstance(operator, str):
            symbol = ArithmeticProvider.normalize(operator.strip())
        if symbol is None:
            return self._reject("add_operator", f"operador no válido {operator!r}")
        if not self._tokens:
            return self._reject("add_operator", "expresión vacía")

        if self._ends_in_operator():
            # Reemplaza el operador final: nunca dos operadores seguidos.
            self._tokens[-1] = Operator(symbol)
        elif self._trailing_number() is None:
            return self._reject("add_operator", "numeral incompleto")
        else:
            self._tokens.append(Operator(symbol))

        self._just_evaluated = False
        return True

    def toggle_sign(self) -> bool:
        number = self._trailing_number()
        if number is None:
            return self._reject("toggle_sign", "no termina en un numeral")

        value = number.value
        value = -abs(value) if value > 0 else abs(value)
        self._tokens[-1] = Number(self._format_number(value))
        return True

    def percentage(self) -> bool:
        number = self._trailing_number()
        if number is None:
            return self._reject("percentage", "no termina en un numeral")

        self._tokens[-1] = Number(self._format_number(number.value / 100))
        return True

    def evaluate(self) -> bool:
        if self._trailing_number() is None:
            return self._reject("evaluate", "expresión vacía o incompleta")
        if not all(tok.is_complete for tok in self._tokens if isinstance(tok, Number)):
            return self._reject("evaluate", "numeral incompleto")

        result = self._evaluator.evaluate_tokens(self._tokens)
        text = self._format_result(result)
        logger.debug("%r = %s", self.get_expr(), text)

        self._tokens = [Number(text)]
        self._just_evaluated = True
        return True

    def delete_last(self) -> bool:
        if not self._tokens:
            return self._reject("delete_last", "expresión vacía")

        last = self._tokens[-1]
        if isinstance(last, Operator):
            self._tokens.pop()
        elif len(last.text) > 1:
            self._tokens[-1] = Number(last.text[:-1])
        else:
            self._tokens.pop()
        return True

    def clear(self) -> bool:
        self._tokens = []
        return True

    # ── Formato del resultado ────────────────────────────────────

    def _format_result(self, value: float) -> str:
        if not math.isfinite(value):
            return self._format_number(value)

        rounded = self._round_half_up(value, self._round_decimals)
        if abs(rounded) > self.SCI_NOTATION_THRESHOLD:
            return self._format_scientific(rounded, self.SCI_FRACTION_DIGITS)
        return self._format_number(rounded)

    @staticmethod
    def _round_half_up(value: float, decimals: int) -> float:
        if abs(value) >= 2**52:
            return value
        factor = 10**decimals
        return math.floor(value * factor + 0.5) / factor

    @staticmethod
    def _format_scientific(value: float, fraction_digits: int) -> str:
        # Redondeo de la mantisa a la mitad hacia arriba, como _round_half_up.
        number = Decimal(repr(value))
        exp = number.adjusted()
        step = Decimal(1).scaleb(-fraction_digits)
        mantissa = number.scaleb(-exp).quantize(step, rounding=ROUND_HALF_UP)
        if abs(mantissa) >= 10:
            exp += 1
            mantissa = number.scaleb(-exp).quantize(step, rounding=ROUND_HALF_UP)
        return f"{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp)}"

    @classmethod
    def _format_number(cls, value: float) -> str:
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "∞" if value > 0 else "-∞"

        low, high = cls.PLAIN_NOTATION_RANGE
        if value.is_integer() and abs(value) < high:
            return str(int(value))

        text = repr(value)
        if "e" not in text:
            return text
        if low <= abs(value) < high:
            return format(Decimal(text), "f")

        mantissa, _, exponent = text.partition("e")
        exp = int(exponent)
        return f"{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp)}"
