import random
from decimal import Decimal

import pytest

from gestao.exceptions import ValidationError
from gestao.services.order_totals import (
    line_total,
    recompute,
    sync_single_payment,
    to_money,
    to_quantity,
)


def test_two_items_plus_delivery_fee():
    totals = recompute(
        [
            {'product_id': 1, 'quantity': 2, 'unit_price': '10.00'},
            {'product_id': 2, 'quantity': 1, 'unit_price': '5.50'},
        ],
        delivery_fee='2.50',
    )

    assert [line.total_price for line in totals.lines] == [Decimal('20.00'), Decimal('5.50')]
    assert totals.items_total == Decimal('25.50')
    assert totals.total_value == Decimal('28.00')


def test_no_items_total_is_delivery_fee():
    totals = recompute([], delivery_fee='7.00')
    assert totals.total_value == Decimal('7.00')


def test_line_total_rounds_half_up():
    assert line_total(3, '0.335') == Decimal('1.02')
    assert to_money('0.005') == Decimal('0.01')


def test_total_matches_sum_of_items_for_random_orders():
    rng = random.Random(20240501)

    for _ in range(200):
        items = [
            {
                'product_id': n,
                'quantity': rng.randint(1, 20),
                'unit_price': Decimal(rng.randint(0, 50000)) / 100,
            }
            for n in range(rng.randint(0, 8))
        ]
        fee = Decimal(rng.randint(0, 2000)) / 100

        totals = recompute(items, fee)

        for item, line in zip(items, totals.lines):
            assert line.total_price == item['quantity'] * item['unit_price']
        assert totals.total_value == sum((line.total_price for line in totals.lines), Decimal('0')) + fee


@pytest.mark.parametrize('quantity', [0, -1, '1.5', 'abc', None, True])
def test_invalid_quantity_rejected(quantity):
    with pytest.raises(ValidationError):
        to_quantity(quantity)


@pytest.mark.parametrize('value', ['-0.01', 'NaN', 'dez', '', None])
def test_invalid_money_rejected(value):
    with pytest.raises(ValidationError):
        to_money(value)


def test_negative_delivery_fee_rejected():
    with pytest.raises(ValidationError):
        recompute([{'product_id': 1, 'quantity': 1, 'unit_price': '1.00'}], delivery_fee='-1')


def test_single_payment_follows_total_until_value_is_given():
    synced = sync_single_payment([{'payment_method_id': 1, 'value': None}], Decimal('28.00'))
    assert synced[0]['value'] == Decimal('28.00')

    explicit = sync_single_payment([{'payment_method_id': 1, 'value': Decimal('50.00')}], Decimal('28.00'))
    assert explicit[0]['value'] == Decimal('50.00')

    several = sync_single_payment(
        [{'payment_method_id': 1, 'value': None}, {'payment_method_id': 2, 'value': Decimal('5')}],
        Decimal('28.00'),
    )
    assert several[0]['value'] is None
