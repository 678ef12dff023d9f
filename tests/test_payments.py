import random
from decimal import Decimal

import pytest

from gestao.exceptions import ValidationError
from gestao.services.payments import (
    PaymentLine,
    add_payment_method,
    allocate,
    remaining_balance,
    remove_payment_method,
)

CASH = 1
CARD = 2
PIX = 3


def test_insufficient_payment_rejected():
    with pytest.raises(ValidationError) as exc:
        allocate(Decimal('28.00'), [{'payment_method_id': CARD, 'value': '20.00'}], [CASH])

    assert exc.value.message == 'insufficient payment'
    assert exc.value.details['missing'] == '8.00'


def test_cash_overpayment_generates_change():
    allocation = allocate(Decimal('28.00'), [{'payment_method_id': CASH, 'value': '50.00'}], [CASH])

    assert allocation.total_paid == Decimal('50.00')
    assert allocation.lines[0].change == Decimal('22.00')
    assert allocation.change == Decimal('22.00')


def test_change_only_on_cash_line():
    allocation = allocate(
        Decimal('28.00'),
        [
            {'payment_method_id': CARD, 'value': '20.00'},
            {'payment_method_id': CASH, 'value': '10.00'},
        ],
        [CASH],
    )

    changes = {line.payment_method_id: line.change for line in allocation.lines}
    assert changes == {CARD: Decimal('0.00'), CASH: Decimal('2.00')}


def test_overpayment_without_cash_line_has_no_change():
    allocation = allocate(Decimal('10.00'), [{'payment_method_id': CARD, 'value': '12.00'}], [CASH])
    assert allocation.change == Decimal('0.00')


def test_first_cash_line_receives_change():
    allocation = allocate(
        Decimal('10.00'),
        [
            {'payment_method_id': CASH, 'value': '5.00'},
            {'payment_method_id': PIX, 'value': '10.00'},
        ],
        [CASH, PIX],
    )

    assert [line.change for line in allocation.lines] == [Decimal('5.00'), Decimal('0.00')]


def test_empty_and_duplicated_payments_rejected():
    with pytest.raises(ValidationError):
        allocate(Decimal('10.00'), [])

    with pytest.raises(ValidationError):
        allocate(
            Decimal('10.00'),
            [{'payment_method_id': CARD, 'value': '5'}, {'payment_method_id': CARD, 'value': '5'}],
        )


def test_negative_payment_rejected():
    with pytest.raises(ValidationError):
        allocate(Decimal('10.00'), [{'payment_method_id': CARD, 'value': '-10'}])


def test_added_method_defaults_to_remaining_balance():
    lines = add_payment_method([PaymentLine(CARD, Decimal('20.00'))], CASH, Decimal('28.00'))

    assert lines[-1] == PaymentLine(CASH, Decimal('8.00'))
    assert remaining_balance(Decimal('28.00'), lines) == Decimal('0.00')


def test_adding_same_method_twice_rejected():
    with pytest.raises(ValidationError):
        add_payment_method([PaymentLine(CARD, Decimal('20.00'))], CARD, Decimal('28.00'))


def test_remove_method():
    lines = [PaymentLine(CARD, Decimal('20.00')), PaymentLine(CASH, Decimal('8.00'))]

    assert remove_payment_method(lines, CASH) == [PaymentLine(CARD, Decimal('20.00'))]

    with pytest.raises(ValidationError):
        remove_payment_method(lines, PIX)

    with pytest.raises(ValidationError):
        remove_payment_method([PaymentLine(CARD, Decimal('28.00'))], CARD)


def test_allocation_rules_hold_for_random_payments():
    rng = random.Random(20240502)

    for _ in range(300):
        total = Decimal(rng.randint(0, 50000)) / 100
        methods = rng.sample([CASH, CARD, PIX], rng.randint(1, 3))
        payments = [
            {'payment_method_id': method, 'value': Decimal(rng.randint(0, 30000)) / 100}
            for method in methods
        ]
        paid = sum((p['value'] for p in payments), Decimal('0'))

        if paid < total:
            with pytest.raises(ValidationError):
                allocate(total, payments, [CASH])
            continue

        allocation = allocate(total, payments, [CASH])

        for line in allocation.lines:
            expected = paid - total if line.payment_method_id == CASH else Decimal('0')
            assert line.change == expected
        assert allocation.total_paid == paid
        if CASH in methods:
            assert allocation.change == paid - total
