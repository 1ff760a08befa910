"""Округление как в калькуляторах: половина округляется от нуля."""
from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, digits: int = 0):
    """
    Округляет ``value`` до ``digits`` знаков, 0.5 уходит от нуля.

    Встроенный round() округляет 286.5 до 286, здесь будет 287.
    Шум float (286.49999999999997) убирается предварительным округлением
    до 9 знаков.

    Returns:
        int при digits == 0, иначе float
    """
    quantum = Decimal(1).scaleb(-digits)
    result = Decimal(repr(round(float(value), 9))).quantize(quantum, rounding=ROUND_HALF_UP)
    if digits == 0:
        return int(result)
    return float(result)
