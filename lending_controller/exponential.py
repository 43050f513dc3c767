"""Checked 256-bit fixed-point arithmetic — pure functions, no I/O.

Values are plain ``int``s. A *mantissa* is a number scaled by ``EXP_SCALE``
(1e18), so ``5 * 10**17`` is 0.5. Every result is kept inside the unsigned
256-bit range; leaving it raises ``MathError`` instead of wrapping.
"""
from __future__ import annotations

from decimal import Decimal, localcontext

from .errors import MathError

EXP_SCALE = 10**18
HALF_EXP_SCALE = EXP_SCALE // 2
MAX_UINT256 = 2**256 - 1


def _bounded(value: int, op: str) -> int:
    if value < 0:
        raise MathError(f"{op} underflow", {"result": value})
    if value > MAX_UINT256:
        raise MathError(f"{op} overflow", {"result": value})
    return value


def add_(a: int, b: int) -> int:
    return _bounded(a + b, "add")


def sub_(a: int, b: int) -> int:
    return _bounded(a - b, "sub")


def mul_(a: int, b: int) -> int:
    return _bounded(a * b, "mul")


def div_(a: int, b: int) -> int:
    if b == 0:
        raise MathError("division by zero", {"numerator": a})
    return _bounded(a, "div") // b


def mul_exp(a: int, b: int) -> int:
    """Multiply two mantissas, truncating: ``a * b / 1e18``."""
    return div_(mul_(a, b), EXP_SCALE)


def div_exp(a: int, b: int) -> int:
    """Divide two mantissas, truncating: ``a * 1e18 / b``."""
    return div_(mul_(a, EXP_SCALE), b)


def mul_scalar_truncate(exp: int, scalar: int) -> int:
    """Apply a mantissa to a plain integer amount, truncating the fraction."""
    return div_(mul_(exp, scalar), EXP_SCALE)


def mul_scalar_truncate_add(exp: int, scalar: int, addend: int) -> int:
    return add_(mul_scalar_truncate(exp, scalar), addend)


def scale_price(price: int, decimals: int) -> int:
    """Convert a whole-token price into a price per raw token unit (mantissa).

    Oracles quote one whole token; balances are counted in ``10**-decimals``
    units, so ``price * 1e18 / 10**decimals`` makes both line up.
    """
    return div_(mul_(price, EXP_SCALE), 10**decimals)


def to_mantissa(value: str | int | float | Decimal, scale: int = 18) -> int:
    """Convert a human-readable decimal (``"0.75"``) into a scaled integer.

    Strings go through ``Decimal`` so ``"0.1"`` becomes exactly ``10**17``.
    """
    with localcontext() as ctx:
        ctx.prec = 100
        scaled = Decimal(str(value)) * (Decimal(10) ** scale)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{value!r} has more than {scale} decimal places")
    if scaled < 0 or scaled > MAX_UINT256:
        raise ValueError(f"{value!r} is outside the unsigned 256-bit range")
    return int(scaled)


def from_mantissa(value: int, scale: int = 18) -> Decimal:
    """Inverse of :func:`to_mantissa`, for display."""
    return Decimal(value) / (Decimal(10) ** scale)
