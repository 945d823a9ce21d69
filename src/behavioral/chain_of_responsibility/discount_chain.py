"""
Chain of Responsibility (Behavioral) — cart discount pipeline.

Intent:
    Pass a cart along an ordered chain of discount handlers; every handler
    adds its own contribution to the running rate and forwards the cart to
    its successor until the terminal handler ends the walk.

When to use:
    - Several independent pricing rules stack on the same order.
    - Rules should be added, removed or reordered without touching the others.

Participants:
    - DiscountHandler (abstract): decides a single contribution for a cart.
    - ItemCountHandler / OrderTotalHandler: concrete pricing rules.
    - TerminalHandler: contributes nothing and has no successor.
    - DiscountChain (client): owns the handlers and the fixed successor links.

Notes:
    - Handlers never hold a successor. The chain links them once, at
      construction, from the ordered sequence it receives.
    - Contributions are additive: a cart matching both default rules gets 0.15.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from numbers import Real
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)


# ---------- Errors ----------

class InvalidInputError(ValueError):
    """
    Raised when a product amount is not a finite, non-negative number.
    """


class ChainConfigurationError(ValueError):
    """
    Raised when the handler sequence cannot form a valid chain.
    """


# ---------- Domain ----------

def _check_amount(amount: object, position: Optional[int] = None) -> Real:
    where = "" if position is None else f" at position {position}"
    if isinstance(amount, bool) or not isinstance(amount, Real):
        raise InvalidInputError(f"Product amount{where} must be a number, got {amount!r}")
    try:
        as_float = float(amount)
    except OverflowError as exc:
        raise InvalidInputError(f"Product amount{where} is too large, got {amount!r}") from exc
    if not math.isfinite(as_float):
        raise InvalidInputError(f"Product amount{where} must be finite, got {amount!r}")
    if amount < 0:
        raise InvalidInputError(f"Product amount{where} must be non-negative, got {amount!r}")
    return amount


def _check_rate(rate: object) -> float:
    if isinstance(rate, bool) or not isinstance(rate, Real) or not 0 <= rate <= 1:
        raise ChainConfigurationError(f"Discount rate must be within [0, 1], got {rate!r}")
    return rate


def _check_threshold(threshold: object) -> Real:
    if isinstance(threshold, bool) or not isinstance(threshold, Real) or not threshold >= 0:
        raise ChainConfigurationError(f"Discount threshold must be non-negative, got {threshold!r}")
    return threshold


@dataclass(frozen=True, slots=True)
class Product:
    """Single priced line in a cart.

    :ivar amount: Non-negative, finite price.
    :raises InvalidInputError: If the amount is malformed.
    """
    amount: Real

    def __post_init__(self) -> None:
        _check_amount(self.amount)


class Cart:
    """
    Ordered collection of products.

    :param products: Optional initial products or raw amounts.
    """

    def __init__(self, products: Iterable[Union[Product, Real]] = ()) -> None:
        self._products: List[Product] = []
        for item in products:
            self.add(item)

    def add(self, item: Union[Product, Real]) -> "Cart":
        """
        Appends a product; raw amounts are wrapped in a Product.

        :param item: A Product or its amount.
        :return: The cart itself, for fluent building.
        :raises InvalidInputError: If the amount is malformed.
        """
        if not isinstance(item, Product):
            item = Product(_check_amount(item, len(self._products)))
        self._products.append(item)
        return self

    @property
    def products(self) -> Tuple[Product, ...]:
        return tuple(self._products)

    @property
    def count(self) -> int:
        return len(self._products)

    @property
    def total(self) -> Real:
        """
        :return: Sum of all amounts; 0 for an empty cart.
        """
        return sum((p.amount for p in self._products), 0)

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products)

    def __repr__(self) -> str:
        return f"Cart(count={self.count}, total={self.total})"


@dataclass
class DiscountPolicy:
    """
    Thresholds and rates used by the default chain.

    :param item_count_threshold: Carts with strictly more items get the count rate.
    :param item_count_rate: Contribution of the item count rule.
    :param order_total_threshold: Carts totalling at least this get the total rate.
    :param order_total_rate: Contribution of the order total rule.
    """
    item_count_threshold: int = 3
    item_count_rate: float = 0.05
    order_total_threshold: float = 500
    order_total_rate: float = 0.10

    def __post_init__(self) -> None:
        _check_rate(self.item_count_rate)
        _check_rate(self.order_total_rate)
        _check_threshold(self.item_count_threshold)
        _check_threshold(self.order_total_threshold)


@dataclass(frozen=True, slots=True)
class Contribution:
    """
    :ivar handler_name: Name of the handler that produced the rate.
    :ivar rate: Fraction added to the running discount.
    """
    handler_name: str
    rate: float


@dataclass(frozen=True, slots=True)
class DiscountResult:
    """
    Outcome of walking the chain for one cart.

    :ivar rate: Final discount rate, clamped to [0, 1].
    :ivar contributions: Per-handler breakdown in chain order.
    """
    rate: float
    contributions: Tuple[Contribution, ...] = field(default_factory=tuple)


# ---------- Handlers ----------

class DiscountHandler(ABC):
    """Abstract pricing rule.

    Handlers only decide their own contribution; forwarding belongs to the chain.
    """

    name: str = "handler"
    is_terminal: bool = False

    @abstractmethod
    def contribution(self, cart: Cart) -> float:
        """
        :param cart: Cart being priced.
        :return: Fraction this handler adds to the discount.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class ItemCountHandler(DiscountHandler):
    """Rewards carts with more than `threshold` items."""

    name = "item_count"

    def __init__(self, threshold: int = 3, rate: float = 0.05) -> None:
        self.threshold = _check_threshold(threshold)
        self.rate = _check_rate(rate)

    def contribution(self, cart: Cart) -> float:
        return self.rate if cart.count > self.threshold else 0.0


class OrderTotalHandler(DiscountHandler):
    """Rewards carts whose total reaches `threshold`."""

    name = "order_total"

    def __init__(self, threshold: float = 500, rate: float = 0.10) -> None:
        self.threshold = _check_threshold(threshold)
        self.rate = _check_rate(rate)

    def contribution(self, cart: Cart) -> float:
        return self.rate if cart.total >= self.threshold else 0.0


class TerminalHandler(DiscountHandler):
    """End of every chain."""

    name = "terminal"
    is_terminal = True

    def contribution(self, cart: Cart) -> float:
        return 0.0


# ---------- Chain ----------

@dataclass(frozen=True, slots=True)
class _Link:
    handler: DiscountHandler
    successor: Optional["_Link"] = None

    def handle(self, cart: Cart) -> Contribution:
        rate = self.handler.contribution(cart)
        if not math.isfinite(rate):
            raise ChainConfigurationError(
                f"Handler {self.handler.name!r} returned a non-finite rate: {rate!r}"
            )
        logger.debug("%s contributed %s", self.handler.name, rate)
        return Contribution(self.handler.name, rate)


class DiscountChain:
    """
    Ordered, immutable chain of discount handlers.

    :param handlers: Handlers in evaluation order. A TerminalHandler is
        appended when the sequence does not already end with one.
    :raises ChainConfigurationError: If a terminal is not last or appears twice.
    """

    def __init__(self, handlers: Sequence[DiscountHandler] = ()) -> None:
        ordered = list(handlers)
        terminals = [i for i, h in enumerate(ordered) if h.is_terminal]
        if len(terminals) > 1:
            raise ChainConfigurationError("A chain can hold only one terminal handler.")
        if terminals and terminals[0] != len(ordered) - 1:
            raise ChainConfigurationError("The terminal handler must be the last in the chain.")
        if not terminals:
            ordered.append(TerminalHandler())

        self._handlers: Tuple[DiscountHandler, ...] = tuple(ordered)
        head: Optional[_Link] = None
        for handler in reversed(self._handlers):
            head = _Link(handler, head)
        self._head: _Link = head

    @property
    def handlers(self) -> Tuple[DiscountHandler, ...]:
        return self._handlers

    def evaluate(self, cart: Cart) -> DiscountResult:
        """
        Walks the chain and keeps the per-handler breakdown.

        :param cart: Cart to price.
        :return: DiscountResult with the clamped rate.
        :raises ChainConfigurationError: If a handler returns NaN or infinity.
        """
        collected: List[Contribution] = []
        link: Optional[_Link] = self._head
        while link is not None:
            collected.append(link.handle(cart))
            link = link.successor
        raw = sum(c.rate for c in collected)
        rate = min(max(raw, 0.0), 1.0)
        if rate != raw:
            logger.warning("Discount rate %s clamped to %s", raw, rate)
        logger.info("Discount rate for %r: %s", cart, rate)
        return DiscountResult(rate=rate, contributions=tuple(collected))

    def compute_discount_rate(self, cart: Cart) -> float:
        """
        :param cart: Cart to price.
        :return: Sum of all contributions, within [0, 1].
        :raises ChainConfigurationError: If a handler returns NaN or infinity.
        """
        return self.evaluate(cart).rate

    def discounted_total(self, cart: Cart) -> float:
        """
        :param cart: Cart to price.
        :return: Cart total after applying the chain's rate.
        """
        return cart.total * (1 - self.compute_discount_rate(cart))


def build_default_chain(policy: Optional[DiscountPolicy] = None) -> DiscountChain:
    """Build the canonical chain (ItemCount → OrderTotal → Terminal).

    :param policy: Thresholds and rates; defaults to DiscountPolicy().
    :return: A ready DiscountChain.
    """
    policy = policy or DiscountPolicy()
    return DiscountChain([
        ItemCountHandler(policy.item_count_threshold, policy.item_count_rate),
        OrderTotalHandler(policy.order_total_threshold, policy.order_total_rate),
    ])


__all__ = [
    "InvalidInputError",
    "ChainConfigurationError",
    "Product",
    "Cart",
    "DiscountPolicy",
    "Contribution",
    "DiscountResult",
    "DiscountHandler",
    "ItemCountHandler",
    "OrderTotalHandler",
    "TerminalHandler",
    "DiscountChain",
    "build_default_chain",
]


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    chain = build_default_chain()
    print(chain.compute_discount_rate(Cart([100, 100, 100, 100, 100])))  # 0.15
    print(chain.compute_discount_rate(Cart([50, 50])))  # 0
