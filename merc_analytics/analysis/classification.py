"""Pure classification rules for transfers and holders."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class KnownAddressSet:
    """Immutable set of lowercase DEX pool/router addresses."""

    __slots__ = ("_addresses",)

    def __init__(self, addresses: Iterable[str] = ()):
        self._addresses = frozenset(a.lower() for a in addresses if a)

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and address.lower() in self._addresses

    def __len__(self) -> int:
        return len(self._addresses)

    def __iter__(self):
        return iter(self._addresses)

    def union(self, addresses: Iterable[str]) -> "KnownAddressSet":
        return KnownAddressSet([*self._addresses, *addresses])

    def __repr__(self) -> str:
        return f"KnownAddressSet({len(self._addresses)} addresses)"


class Direction(str, Enum):
    BUY = "Buy"
    SELL = "Sell"
    TRANSFER = "Transfer"


class HolderDirection(str, Enum):
    BUY = "Buy"
    SELL = "Sell"
    TRANSFER_IN = "Transfer In"
    TRANSFER_OUT = "Transfer Out"


class Behavior(str, Enum):
    DIAMOND_HANDS = "Diamond Hands"
    ACCUMULATOR = "Accumulator"
    ACTIVE_TRADER = "Active Trader"
    PARTIAL_SELLER = "Partial Seller"
    IMMEDIATE_LIQUIDATOR = "Immediate Liquidator"
    NEW_HOLDER = "New Holder"


class AcquisitionMethod(str, Enum):
    BOUGHT = "Bought"
    RECEIVED = "Received"
    MIXED = "Mixed"


class ExitStatus(str, Enum):
    HOLDING = "Holding"
    PARTIAL_EXIT = "Partial Exit"
    FULL_EXIT = "Full Exit"


def classify_direction(from_address: str, to_address: str, known: KnownAddressSet) -> Direction:
    """Buy when tokens leave a DEX address for a wallet, Sell for the reverse."""
    from_is_dex = from_address in known
    to_is_dex = to_address in known

    if from_is_dex and not to_is_dex:
        return Direction.BUY
    if to_is_dex and not from_is_dex:
        return Direction.SELL
    return Direction.TRANSFER


def classify_direction_for_holder(
    from_address: str,
    to_address: str,
    holder: str,
    known: KnownAddressSet,
) -> HolderDirection:
    """Direction of a transfer from the point of view of ``holder``."""
    holder = holder.lower()

    if to_address.lower() == holder:
        return HolderDirection.BUY if from_address in known else HolderDirection.TRANSFER_IN
    if from_address.lower() == holder:
        return HolderDirection.SELL if to_address in known else HolderDirection.TRANSFER_OUT
    return HolderDirection.TRANSFER_IN


def clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


@dataclass(frozen=True)
class BehaviorRates:
    total_acquired: float
    retention_rate: float
    sell_rate: float


def behavior_rates(bought: float, received: float, sold: float, current_balance: float) -> BehaviorRates:
    total_acquired = bought + received
    if total_acquired > 0:
        retention = current_balance / total_acquired * 100
        sell_rate = sold / total_acquired * 100
    else:
        retention = 100.0
        sell_rate = 0.0
    return BehaviorRates(total_acquired, retention, sell_rate)


def classify_behavior(
    holding_days: int,
    bought: float,
    received: float,
    sold: float,
    sent: float,
    current_balance: float,
) -> tuple[Behavior, str]:
    """
    Assign a behavioral archetype to a holder.

    Rules are evaluated in order and the first match wins; the order matters
    at boundary values (exactly 7 days, exactly 80% sold).

    Returns:
        (behavior, human-readable description)
    """
    rates = behavior_rates(bought, received, sold, current_balance)
    retention, sell_rate = rates.retention_rate, rates.sell_rate

    if holding_days < 7:
        if sell_rate > 80:
            return Behavior.IMMEDIATE_LIQUIDATOR, "Sold most tokens within days of acquisition"
        plural = "" if holding_days == 1 else "s"
        return Behavior.NEW_HOLDER, f"Acquired {holding_days} day{plural} ago, watching behavior"

    if sell_rate > 80 and holding_days < 14:
        return Behavior.IMMEDIATE_LIQUIDATOR, "Quickly sold majority of acquired tokens"

    if holding_days >= 30 and retention >= 90:
        return (
            Behavior.DIAMOND_HANDS,
            f"Holding strong for {holding_days} days with {clamp_percent(retention):.0f}% retention",
        )

    if bought > sold * 2 and holding_days >= 14:
        return Behavior.ACCUMULATOR, "Consistently adding to position over time"

    if sold > 0 and bought > 0 and 30 <= sell_rate <= 70:
        return Behavior.ACTIVE_TRADER, "Regularly trading in and out of position"

    if 20 < sell_rate < 80 and current_balance > 0:
        return Behavior.PARTIAL_SELLER, f"Sold {sell_rate:.0f}% of acquired tokens, still holding"

    if retention >= 70:
        return Behavior.DIAMOND_HANDS, f"Long-term holder with {clamp_percent(retention):.0f}% retention"

    return Behavior.ACTIVE_TRADER, "Mixed trading activity"


def acquisition_method(bought: float, received: float) -> AcquisitionMethod:
    if bought > 0 and received == 0:
        return AcquisitionMethod.BOUGHT
    if received > 0 and bought == 0:
        return AcquisitionMethod.RECEIVED
    return AcquisitionMethod.MIXED


DURATION_BUCKETS = (
    ("lessThan7Days", 0, 7),
    ("oneToFourWeeks", 7, 30),
    ("oneToThreeMonths", 30, 90),
    ("threeToSixMonths", 90, 180),
    ("sixMonthsPlus", 180, None),
)


def holding_duration_bucket(days: int) -> str:
    for name, low, high in DURATION_BUCKETS:
        if days >= low and (high is None or days < high):
            return name
    return DURATION_BUCKETS[0][0]


def format_duration(days: int) -> str:
    if days == 0:
        return "Today"
    if days == 1:
        return "1 day"
    if days < 7:
        return f"{days} days"
    if days < 30:
        weeks = days // 7
        return f"{weeks} week{'s' if weeks > 1 else ''}"
    if days < 365:
        months = days // 30
        return f"{months} month{'s' if months > 1 else ''}"
    return f"{days / 365:.1f} years"


def exit_status(current_balance: float, retention_rate: float) -> ExitStatus:
    if current_balance < 1 or retention_rate < 5:
        return ExitStatus.FULL_EXIT
    if retention_rate < 80:
        return ExitStatus.PARTIAL_EXIT
    return ExitStatus.HOLDING


def whale_severity(amount: float, high: float = 50_000, critical: float = 100_000) -> str:
    if amount >= critical:
        return "critical"
    if amount >= high:
        return "high"
    return "medium"


def holder_size_tier(
    balance: float,
    whale: float = 10_000_000,
    large: float = 1_000_000,
    medium: float = 100_000,
    small: float = 10_000,
) -> str:
    if balance > whale:
        return "whales"
    if balance > large:
        return "large"
    if balance > medium:
        return "medium"
    if balance > small:
        return "small"
    return "micro"
