"""
Unsigned 64.64 fixed-point arithmetic.

Prices are stored as uint128 values scaled by 2**64. Amounts are uint256.
Python integers are unbounded, so the 256-bit word boundaries the algorithms
depend on are enforced with explicit masks.

Key concepts:
- scaled_mul: price x amount, split into a low and a high 128-bit limb so the
  partial products never exceed a 256-bit word. Overflow is fatal.
- scaled_div: amount / amount as a 64.64 price. Results whose integer part
  needs more than 64 bits are reported as 0, which callers read as "no usable
  price" (the reserves are too thin to trust).
"""

from .errors import DivisionConsistencyError, FixedPointOverflowError

Q64 = 2**64

U128_MAX = (1 << 128) - 1
U192_MAX = (1 << 192) - 1
U256_MAX = (1 << 256) - 1


def _check_uint(value: int, max_value: int, name: str) -> None:
    if not isinstance(value, int) or value < 0 or value > max_value:
        raise ValueError(f"{name} must be an unsigned integer <= {max_value}, got: {value!r}")


def most_significant_bit(x: int) -> int:
    """
    Index of the highest set bit of a positive integer.

    Equivalent to the 32/16/8/4/2/1 descending shift scan over x >> 192 used
    by the classic 64.64 long division, offset by 192.
    """
    if x <= 0:
        raise ValueError("most_significant_bit is undefined for values <= 0")
    return x.bit_length() - 1


def scaled_mul(price: int, amount: int) -> int:
    """
    Multiply a 64.64 price by an unsigned 256-bit amount.

    Args:
        price: Price scaled by 2**64 (uint128)
        amount: Unsigned integer amount (uint256)

    Returns:
        floor(price * amount / 2**64) as a uint256

    Raises:
        FixedPointOverflowError: If either partial product leaves the 256-bit word
    """
    _check_uint(price, U128_MAX, "price")
    _check_uint(amount, U256_MAX, "amount")

    if price == 0 or amount == 0:
        return 0

    lo = (price * (amount & U128_MAX)) >> 64
    hi = price * (amount >> 128)

    if hi > U192_MAX:
        raise FixedPointOverflowError(
            f"high limb overflow in scaled_mul (price={price}, amount={amount})"
        )
    hi <<= 64

    if hi > U256_MAX - lo:
        raise FixedPointOverflowError(
            f"sum overflow in scaled_mul (price={price}, amount={amount})"
        )
    return hi + lo


def scaled_div(numerator: int, denominator: int) -> int:
    """
    Divide two unsigned 256-bit integers into a 64.64 price.

    Args:
        numerator: Dividend (uint256)
        denominator: Divisor (uint256)

    Returns:
        floor(numerator * 2**64 / denominator) as a uint128, or 0 when the
        denominator is 0 or the quotient does not fit in 128 bits

    Raises:
        DivisionConsistencyError: If the correction step's limbs disagree
    """
    _check_uint(numerator, U256_MAX, "numerator")
    _check_uint(denominator, U256_MAX, "denominator")

    if denominator == 0:
        return 0

    if numerator <= U192_MAX:
        answer = (numerator << 64) // denominator
    else:
        msb = most_significant_bit(numerator)

        # Numerator shifted to the top of the word, denominator rounded up
        answer = (numerator << (255 - msb)) // (((denominator - 1) >> (msb - 191)) + 1)

        # The estimate never exceeds the true quotient, so this already saturates
        if answer > U128_MAX:
            return 0

        hi = (answer * (denominator >> 128)) & U256_MAX
        lo = (answer * (denominator & U128_MAX)) & U256_MAX

        xh = numerator >> 192
        xl = (numerator << 64) & U256_MAX

        if xl < lo:
            xh = (xh - 1) & U256_MAX
        xl = (xl - lo) & U256_MAX
        lo = (hi << 128) & U256_MAX
        if xl < lo:
            xh = (xh - 1) & U256_MAX
        xl = (xl - lo) & U256_MAX

        if xh != hi >> 128:
            raise DivisionConsistencyError(
                f"inconsistent high limb in scaled_div "
                f"(numerator={numerator}, denominator={denominator})"
            )

        answer += xl // denominator

    # Integer part beyond 64 bits: reserves too thin to be a usable price
    if answer > U128_MAX:
        return 0
    return answer
