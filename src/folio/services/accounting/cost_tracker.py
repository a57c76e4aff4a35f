"""Moving-average cost tracker.

Replays trades in timestamp order and maintains, per security, the held
quantity and the moving-average cost per unit:

- Buy (increasing a long):   avg = (qty * avg + buy_qty * price) / (qty + buy_qty)
- Sell (reducing a long):    qty decreases, avg unchanged
- Flat (qty back to zero):   avg resets to zero
- Crossing zero:             remaining units carry the price of the crossing trade

Short positions mirror the same rules with signs reversed.
"""

from decimal import Decimal

from folio.services.accounting.models import Security, Trade


class MovingAverageCostTracker:
    """
    Per-security quantity and moving-average cost.

    Example:
        >>> tracker = MovingAverageCostTracker()
        >>> tracker.apply(buy_100_at_20)
        >>> tracker.apply(buy_200_at_20_7625)
        >>> tracker.average_cost(cmb)  # Decimal("20.50833...")
    """

    def __init__(self) -> None:
        """Initialize empty tracker."""
        self._quantity: dict[Security, Decimal] = {}
        self._average_cost: dict[Security, Decimal] = {}

    def apply(self, trade: Trade) -> None:
        """
        Apply one trade.

        Trades must be applied in timestamp order for the average to be meaningful.

        Args:
            trade: Trade to apply
        """
        self.apply_fill(trade.security, trade.signed_quantity, trade.price)

    def apply_fill(self, security: Security, signed_quantity: Decimal, price: Decimal) -> None:
        """
        Apply a signed quantity change at a price.

        Args:
            security: Security traded
            signed_quantity: Positive to add units, negative to remove
            price: Price per unit

        Raises:
            ValueError: If signed_quantity is zero
        """
        if signed_quantity == 0:
            raise ValueError("Cannot apply zero quantity")

        held = self._quantity.get(security, Decimal("0"))
        average = self._average_cost.get(security, Decimal("0"))
        new_held = held + signed_quantity

        if held == 0 or (held > 0) == (signed_quantity > 0):
            # Opening or adding in the same direction: re-average
            total = abs(held) * average + abs(signed_quantity) * price
            average = total / abs(new_held)
        elif new_held == 0:
            average = Decimal("0")
        elif (new_held > 0) != (held > 0):
            # Crossed zero: leftover units were acquired at this price
            average = price
        # Otherwise a partial close: average unchanged

        self._quantity[security] = new_held
        self._average_cost[security] = average

    def quantity(self, security: Security) -> Decimal:
        """Held quantity (positive=long, negative=short, zero=flat or unseen)."""
        return self._quantity.get(security, Decimal("0"))

    def average_cost(self, security: Security) -> Decimal:
        """Moving-average cost per unit (zero when flat or unseen)."""
        return self._average_cost.get(security, Decimal("0"))
