import logging
import math

import pytest
from behavioral.chain_of_responsibility.discount_chain import build_default_chain, Cart, Product,\
    DiscountChain, DiscountHandler, DiscountPolicy, ItemCountHandler, OrderTotalHandler, TerminalHandler,\
    InvalidInputError, ChainConfigurationError


@pytest.mark.unit
@pytest.mark.parametrize("amounts, expected", [
    ([], 0.0),
    ([50, 50], 0.0),
    ([10, 20, 30], 0.0),
    ([100, 100, 100, 100], 0.05),
    ([1, 1, 1, 1, 1, 1], 0.05),
    ([500], 0.10),
    ([200, 200, 100], 0.10),
    ([100, 100, 100, 100, 100], 0.15),
    ([499.99], 0.0),
])
def test_default_chain_rates(amounts, expected):
    chain = build_default_chain()
    assert chain.compute_discount_rate(Cart(amounts)) == pytest.approx(expected)


@pytest.mark.unit
def test_empty_cart_sums_to_zero():
    cart = Cart()
    assert cart.total == 0 and cart.count == 0
    assert build_default_chain().compute_discount_rate(cart) == 0


@pytest.mark.unit
def test_contributions_accumulate_in_chain_order():
    res = build_default_chain().evaluate(Cart([100] * 5))
    assert [c.handler_name for c in res.contributions] == ["item_count", "order_total", "terminal"]
    assert [c.rate for c in res.contributions] == pytest.approx([0.05, 0.10, 0.0])
    assert res.rate == pytest.approx(0.15)


@pytest.mark.unit
def test_reordered_chain_gives_same_rate():
    chain = DiscountChain([OrderTotalHandler(), ItemCountHandler()])
    assert [h.name for h in chain.handlers] == ["order_total", "item_count", "terminal"]
    assert chain.compute_discount_rate(Cart([100] * 5)) == pytest.approx(0.15)


@pytest.mark.unit
def test_explicit_terminal_is_not_duplicated():
    chain = DiscountChain([ItemCountHandler(), TerminalHandler()])
    assert len(chain.handlers) == 2 and chain.handlers[-1].is_terminal


@pytest.mark.unit
def test_chain_without_rules_yields_zero():
    assert DiscountChain().compute_discount_rate(Cart([1000] * 10)) == 0


@pytest.mark.unit
def test_terminal_must_be_last_and_unique():
    with pytest.raises(ChainConfigurationError):
        DiscountChain([TerminalHandler(), ItemCountHandler()])
    with pytest.raises(ChainConfigurationError):
        DiscountChain([ItemCountHandler(), TerminalHandler(), TerminalHandler()])


@pytest.mark.unit
def test_rate_is_clamped_to_one(caplog):
    chain = DiscountChain([ItemCountHandler(threshold=0, rate=0.7), OrderTotalHandler(threshold=0, rate=0.7)])
    with caplog.at_level(logging.WARNING):
        assert chain.compute_discount_rate(Cart([1])) == 1.0
    assert "clamped" in caplog.text


@pytest.mark.unit
def test_custom_policy():
    chain = build_default_chain(DiscountPolicy(item_count_threshold=1, order_total_threshold=100))
    assert chain.compute_discount_rate(Cart([60, 60])) == pytest.approx(0.15)


@pytest.mark.unit
def test_policy_rejects_out_of_range_rate():
    with pytest.raises(ChainConfigurationError):
        DiscountPolicy(item_count_rate=1.5)


@pytest.mark.unit
def test_discounted_total():
    chain = build_default_chain()
    assert chain.discounted_total(Cart([100] * 5)) == pytest.approx(425.0)


@pytest.mark.unit
@pytest.mark.parametrize("amount", [-1, math.nan, math.inf, "10", None, True])
def test_malformed_amounts_are_rejected(amount):
    with pytest.raises(InvalidInputError):
        Cart([10, amount])


@pytest.mark.unit
def test_malformed_amount_reports_position():
    with pytest.raises(InvalidInputError, match="position 2"):
        Cart([1, 2, -3])


@pytest.mark.unit
def test_huge_int_amount_is_rejected_not_overflowed():
    with pytest.raises(InvalidInputError, match="too large") as exc_info:
        Cart([10 ** 400])
    assert isinstance(exc_info.value.__cause__, OverflowError)


class NotANumberHandler(DiscountHandler):
    name = "not_a_number"

    def __init__(self, value):
        self.value = value

    def contribution(self, cart):
        return self.value


@pytest.mark.unit
@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_non_finite_contribution_names_the_handler(value):
    chain = DiscountChain([ItemCountHandler(), NotANumberHandler(value)])
    with pytest.raises(ChainConfigurationError, match="not_a_number"):
        chain.compute_discount_rate(Cart([1]))


@pytest.mark.unit
def test_long_chain_is_walked_without_recursion_limit():
    chain = DiscountChain([ItemCountHandler(threshold=0, rate=0.0) for _ in range(5000)])
    res = chain.evaluate(Cart([1]))
    assert res.rate == 0 and len(res.contributions) == 5001


@pytest.mark.unit
@pytest.mark.parametrize("build", [
    lambda: ItemCountHandler(rate=-5),
    lambda: ItemCountHandler(rate=1.5),
    lambda: ItemCountHandler(threshold=-1),
    lambda: OrderTotalHandler(rate=math.nan),
    lambda: OrderTotalHandler(threshold=-0.01),
])
def test_handlers_reject_out_of_range_settings(build):
    with pytest.raises(ChainConfigurationError):
        build()


@pytest.mark.unit
def test_cart_fluent_add():
    cart = Cart().add(10).add(Product(15))
    assert len(cart) == 2 and cart.total == 25
    assert [p.amount for p in cart] == [10, 15]
