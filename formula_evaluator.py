"""Conversión infija → postfija y evaluación de expresiones aritméticas."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)


NON_FINITE_TEXT = {"∞": math.inf, "-∞": -math.inf, "NaN": math.nan}

_COMPLETE_NUMERAL = re.compile(r"-?(?:\d+\.?\d*|\.\d+)(?:e[+\-]?\d+)?")


@dataclass(frozen=True)
class Number:
    """Numeral de la expresión, guardado en su forma textual."""

    text: str

    @property
    def is_complete(self) -> bool:
        return self.text in NON_FINITE_TEXT or bool(
            _COMPLETE_NUMERAL.fullmatch(self.text)
        )

    @property
    def is_finite(self) -> bool:
        return self.text not in NON_FINITE_TEXT

    @property
    def value(self) -> float:
        if self.text in NON_FINITE_TEXT:
            return NON_FINITE_TEXT[self.text]
        if not self.is_complete:
            raise ValueError(f"Numeral incompleto: {self.text!r}")
        return float(self.text)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Operator:
    """Operador binario: uno de + - * /."""

    symbol: str

    @property
    def precedence(self) -> int:
        return ArithmeticProvider.PRECEDENCE[self.symbol]

    def __str__(self) -> str:
        return self.symbol


Token = Number | Operator


class ArithmeticProvider:
    """Provee la tabla de operaciones binarias y sus precedencias."""

    PRECEDENCE = {"*": 2, "/": 2, "+": 1, "-": 1}
    ALIASES = {"×": "*", "÷": "/", "−": "-"}

    @classmethod
    def normalize(cls, symbol: str) -> str | None:
        """Devuelve el símbolo canónico del operador o None si no lo es."""
        symbol = cls.ALIASES.get(symbol, symbol)
        return symbol if symbol in cls.PRECEDENCE else None

    @staticmethod
    def _divide(left: float, right: float) -> float:
        # División IEEE 754: sin excepción para el divisor cero.
        if right == 0:
            if left == 0 or math.isnan(left):
                return math.nan
            sign = math.copysign(1.0, left) * math.copysign(1.0, right)
            return math.copysign(math.inf, sign)
        return left / right

    def build_operations(self) -> dict:
        return {
            "+": lambda a, b: a + b,
            "-": lambda a, b: a - b,
            "*": lambda a, b: a * b,
            "/": self._divide,
        }


def tokenize(expression: str) -> list[Token]:
    """Separa la expresión por espacios en números y operadores."""
    tokens: list[Token] = []
    for field in expression.split(" "):
        if not field:
            continue
        symbol = ArithmeticProvider.normalize(field)
        if symbol is not None:
            tokens.append(Operator(symbol))
        else:
            tokens.append(Number(field))
    return tokens


def join_tokens(tokens) -> str:
    return " ".join(str(tok) for tok in tokens)


class FormulaEvaluator:
    """Evalúa expresiones infijas sin paréntesis mediante notación postfija."""

    def __init__(self, provider: ArithmeticProvider | None = None):
        self._provider = provider or ArithmeticProvider()
        self._operations = self._provider.build_operations()

    def to_postfix_tokens(self, tokens: list[Token]) -> list[Token]:
        """Algoritmo shunting-yard sin paréntesis.

        Un operador de igual precedencia en la cima de la pila también se
        desapila, de modo que ``8 - 3 - 2`` agrupa por la izquierda.
        """
        output: list[Token] = []
        stack: list[Operator] = []

        for tok in tokens:
            if isinstance(tok, Number):
                output.append(tok)
                continue

            while stack and stack[-1].precedence >= tok.precedence:
                output.append(stack.pop())
            stack.append(tok)

        while stack:
            output.append(stack.pop())
        return output

    def evaluate_postfix_tokens(self, tokens: list[Token]) -> float:
        stack: list[float] = []

        for tok in tokens:
            if isinstance(tok, Number):
                stack.append(tok.value)
                continue

            if len(stack) < 2:
                raise ValueError("Expresión postfija mal formada")
            right = stack.pop()
            left = stack.pop()
            stack.append(self._operations[tok.symbol](left, right))

        if len(stack) != 1:
            raise ValueError("Expresión postfija mal formada")
        return stack[0]

    def evaluate_tokens(self, tokens: list[Token]) -> float:
        if not tokens:
            raise ValueError("Expresión vacía")
        postfix = self.to_postfix_tokens(tokens)
        result = self.evaluate_postfix_tokens(postfix)
        logger.debug(
            "evaluado %r -> postfija %r = %r",
            join_tokens(tokens),
            join_tokens(postfix),
            result,
        )
        return result

    # ── Interfaz basada en cadenas ───────────────────────────────

    def parse(self, expression: str) -> list[Token]:
        if not expression or not expression.strip():
            raise ValueError("Expresión vacía")

        tokens = tokenize(expression)
        for tok in tokens:
            if isinstance(tok, Number) and not tok.is_complete:
                if not re.search(r"[\d∞]", tok.text):
                    raise ValueError(f"Operador desconocido: {tok.text}")
                raise ValueError(f"Numeral inválido: {tok.text}")
        return tokens

    def to_postfix(self, expression: str) -> str:
        return join_tokens(self.to_postfix_tokens(self.parse(expression)))

    def eval_postfix(self, expression: str) -> float:
        return self.evaluate_postfix_tokens(self.parse(expression))

    def calculate(self, expression: str) -> float:
        return self.eval_postfix(self.to_postfix(expression))


_default_evaluator = FormulaEvaluator()


def to_postfix(expression: str) -> str:
    """Convierte ``"2 + 3 * 4"`` en ``"2 3 4 * +"``.

    Raises:
        ValueError: expresión vacía o con símbolos desconocidos.
    """
    return _default_evaluator.to_postfix(expression)


def eval_postfix(expression: str) -> float:
    """Evalúa una expresión postfija como ``"2 3 4 * +"``.

    Raises:
        ValueError: expresión vacía o mal formada.
    """
    return _default_evaluator.eval_postfix(expression)


def calculate(expression: str) -> float:
    """Evalúa una expresión infija respetando la precedencia de operadores."""
    return _default_evaluator.calculate(expression)
