"""Pure risk formulas — liquidity, health factor, seize amounts. No I/O."""
from __future__ import annotations

from typing import Iterable

from ..exponential import (
    EXP_SCALE,
    MAX_UINT256,
    div_,
    div_exp,
    mul_,
    mul_exp,
    mul_scalar_truncate,
    mul_scalar_truncate_add,
    scale_price,
    sub_,
)
from ..models import AssetLiquidityParam, LiquidityResult

# 90%
COLLATERAL_FACTOR_MAX_MANTISSA = 9 * 10**17
HEALTH_FACTOR_LIQUIDATION_THRESHOLD = EXP_SCALE
HEALTH_FACTOR_MAX = MAX_UINT256


def value_in_base_currency(price: int, amount: int, decimals: int) -> int:
    """Base-currency value (mantissa) of ``amount`` raw units of a token.

    value = price * amount / 10^decimals
    """
    return mul_scalar_truncate(scale_price(price, decimals), amount)


def sum_account_liquidity(
    asset_params: Iterable[AssetLiquidityParam],
    token_modify: str | None,
    redeem_tokens: int,
    borrow_amount: int,
) -> tuple[int, int]:
    """Sum risk-weighted collateral and debt (plus hypothetical effects).

    For each market:
        tokens_to_denom = collateral_factor * exchange_rate * price
        sum_collateral += tokens_to_denom * share_balance
        sum_borrow     += price * borrow_balance

    The redeem / borrow effects of ``token_modify`` are added to the borrow
    side, which nets out the same as removing them from collateral.
    """
    sum_collateral = 0
    sum_borrow_plus_effect = 0

    for param in asset_params:
        price = scale_price(param.oracle_price, param.decimals)
        tokens_to_denom = mul_exp(
            mul_exp(param.collateral_factor, param.exchange_rate), price
        )

        sum_collateral = mul_scalar_truncate_add(
            tokens_to_denom, param.token_balance, sum_collateral
        )
        sum_borrow_plus_effect = mul_scalar_truncate_add(
            price, param.borrow_balance, sum_borrow_plus_effect
        )

        if token_modify is not None and param.asset == token_modify:
            sum_borrow_plus_effect = mul_scalar_truncate_add(
                tokens_to_denom, redeem_tokens, sum_borrow_plus_effect
            )
            sum_borrow_plus_effect = mul_scalar_truncate_add(
                price, borrow_amount, sum_borrow_plus_effect
            )

    return sum_collateral, sum_borrow_plus_effect


def to_liquidity_result(sum_collateral: int, sum_borrow: int) -> LiquidityResult:
    if sum_collateral > sum_borrow:
        return LiquidityResult(sub_(sum_collateral, sum_borrow), 0)
    return LiquidityResult(0, sub_(sum_borrow, sum_collateral))


def calculate_health_factor_from_balances(
    total_collateral: int, total_debt: int, liquidation_threshold: int
) -> int:
    """health_factor = collateral * liquidation_threshold / debt (mantissa).

    No debt means the account cannot be liquidated: ``HEALTH_FACTOR_MAX``.
    """
    if total_debt == 0:
        return HEALTH_FACTOR_MAX
    return div_exp(mul_exp(total_collateral, liquidation_threshold), total_debt)


def balance_decrease_allowed(
    total_collateral: int,
    total_debt: int,
    avg_liquidation_threshold: int,
    amount_in_base_currency: int,
    liquidation_threshold: int,
) -> bool:
    """Whether removing collateral worth ``amount_in_base_currency`` keeps HF >= 1.

    The removed value leaves the weighted threshold with the withdrawn
    market's own ``liquidation_threshold``.
    """
    if total_debt == 0:
        return True
    if amount_in_base_currency >= total_collateral:
        return False

    collateral_after = sub_(total_collateral, amount_in_base_currency)
    weighted = mul_(total_collateral, avg_liquidation_threshold)
    removed = mul_(amount_in_base_currency, liquidation_threshold)
    if removed > weighted:
        return False
    threshold_after = div_(sub_(weighted, removed), collateral_after)

    health_factor_after = calculate_health_factor_from_balances(
        collateral_after, total_debt, threshold_after
    )
    return health_factor_after >= HEALTH_FACTOR_LIQUIDATION_THRESHOLD


def liquidate_calculate_seize_tokens(
    price_borrowed: int,
    decimals_borrowed: int,
    price_collateral: int,
    decimals_collateral: int,
    exchange_rate: int,
    liquidation_incentive: int,
    repay_amount: int,
) -> int:
    """Collateral pool shares a liquidator receives for repaying ``repay_amount``.

        seize_tokens = repay * (incentive * price_borrowed)
                             / (price_collateral * exchange_rate)

    Prices are first brought to per-raw-unit terms so assets with different
    decimals compare in the same unit.
    """
    numerator = mul_exp(liquidation_incentive, scale_price(price_borrowed, decimals_borrowed))
    denominator = mul_exp(scale_price(price_collateral, decimals_collateral), exchange_rate)
    ratio = div_exp(numerator, denominator)
    return mul_scalar_truncate(ratio, repay_amount)


def weighted_average(weighted_sum: int, total: int) -> int:
    if total == 0:
        return 0
    return div_(weighted_sum, total)
