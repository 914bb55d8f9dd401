from decimal import Decimal, ROUND_HALF_UP, getcontext

getcontext().prec = 28
CENTS = Decimal("0.01")
SHARE_QUANTUM = Decimal("0.0001")

# Equal shares are not rebalanced, so their sum may drift from the total by
# at most member_count * SHARE_QUANTUM / 2. Fixed at 0.01 up to 200 members.
SPLIT_TOLERANCE = Decimal("0.01")

# Largest value a Numeric(12, 2) column holds.
MAX_TOTAL = Decimal("9999999999.99")


def qround(d: Decimal) -> Decimal:
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def equal_share(total: Decimal, member_count: int) -> Decimal:
    """
    One member's portion of ``total`` split evenly ``member_count`` ways.

    Plain division, no remainder redistribution.
    """
    if member_count <= 0:
        raise ValueError("member_count must be positive")
    return (to_decimal(total) / member_count).quantize(SHARE_QUANTUM, rounding=ROUND_HALF_UP)


def split_tolerance(member_count: int) -> Decimal:
    return max(SPLIT_TOLERANCE, member_count * SHARE_QUANTUM / 2)


def shares_balance(total: Decimal, shares: list[Decimal]) -> bool:
    drift = abs(sum(shares, Decimal("0")) - to_decimal(total))
    return drift <= split_tolerance(len(shares))
