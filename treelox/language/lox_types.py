"""The mapping between Lox values and Python objects.

    nil     -> None
    boolean -> bool
    number  -> float
    string  -> str

Functions, classes and instances are the objects in `lox_callable` and `lox_class`."""

import math
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from treelox.language.lox_callable import LoxCallable
    from treelox.language.lox_class import LoxInstance

LoxLiteral = Union[str, float]
LoxPrimitive = Union[float, str, bool, None]
LoxObject = Union[LoxPrimitive, "LoxCallable", "LoxInstance"]


def lox_is_valid_identifier_start(char: Optional[str]) -> bool:
    return char is not None and (char == "_" or (char.isascii() and char.isalpha()))


def lox_is_valid_identifier_name(char: Optional[str]) -> bool:
    return char is not None and (char == "_" or (char.isascii() and char.isalnum()))


def lox_object_to_str(obj: LoxObject) -> str:
    if obj is None:
        return "nil"
    if isinstance(obj, bool):
        return "true" if obj else "false"
    if isinstance(obj, float):
        if math.isnan(obj):
            return "NaN"
        if math.isinf(obj):
            return "Infinity" if obj > 0 else "-Infinity"
        # Integral numbers print without a fraction: 3.0 is "3", -0.0 is "-0". 1e20 is "1E+20".
        text = repr(obj).upper()
        return text[:-2] if text.endswith(".0") else text
    return str(obj)


def lox_truth(obj: LoxObject) -> bool:
    """Only `nil` and `false` are falsy. `0` and `""` are truthy."""
    return not (obj is None or obj is False)


def lox_equality(left: LoxObject, right: LoxObject) -> bool:
    """Values of different types are never equal, so `true == 1` is false even though
    Python considers the two equal. Instances and callables compare by identity."""
    return type(left) is type(right) and left == right


def lox_division(left: float, right: float) -> float:
    """Divide with IEEE-754 semantics instead of raising on a zero divisor."""
    if right != 0:
        return left / right
    if left == 0 or math.isnan(left):
        return math.nan
    return math.copysign(math.inf, left) * math.copysign(1.0, right)
