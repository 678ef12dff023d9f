import random
from decimal import Decimal

import pytest

from gestao.exceptions import (
    ConflictError,
    InsufficientFundsError,
    InvalidStateError,
    ValidationError,
)
from gestao.models import CashMovement, CashRegister
from gestao.services import cash_register as service
from gestao.services import ledger

pytestmark = pytest.mark.django_db


def test_balance_after_sale_and_withdrawal(user):
    register = service.open_register(user, '100.00')
    service.post_movement(register, ledger.SALE, '50.00', 'Venda balcão', user)
    service.post_movement(register, ledger.WITHDRAWAL, '30.00', 'Sangria', user)

    register.refresh_from_db()
    assert register.balance == Decimal('120.00')

    closed, difference = service.close_register(register, '120.00')
    assert closed.status == CashRegister.STATUS_CLOSED
    assert closed.closing_date is not None
    assert difference == Decimal('0.00')


def test_close_reports_difference_without_blocking(user):
    register = service.open_register(user, '100.00')
    closed, difference = service.close_register(register, '95.50')

    assert closed.status == CashRegister.STATUS_CLOSED
    assert difference == Decimal('-4.50')
    assert closed.reconciliation_difference == Decimal('-4.50')


def test_withdrawal_above_balance_rejected(user):
    register = service.open_register(user, '10.00')

    with pytest.raises(InsufficientFundsError):
        service.post_movement(register, ledger.WITHDRAWAL, '10.01', 'Sangria', user)

    assert register.balance == Decimal('10.00')
    assert not register.movements.exists()


def test_withdrawal_down_to_zero_allowed(user):
    register = service.open_register(user, '10.00')
    service.post_movement(register, ledger.WITHDRAWAL, '10.00', 'Sangria', user)
    assert register.balance == Decimal('0.00')


def test_adjustment_takes_signed_value(user):
    register = service.open_register(user, '10.00')
    service.post_movement(register, ledger.ADJUSTMENT, '-3.00', 'Quebra de caixa', user)
    service.post_movement(register, ledger.ADJUSTMENT, '1.00', 'Sobra', user)
    assert register.balance == Decimal('8.00')

    with pytest.raises(ValidationError):
        service.post_movement(register, ledger.ADJUSTMENT, '0', 'Nada', user)


@pytest.mark.parametrize('value', ['0', '-5.00'])
def test_non_positive_values_rejected(user, value):
    register = service.open_register(user, '10.00')
    with pytest.raises(ValidationError):
        service.post_movement(register, ledger.DEPOSIT, value, 'Suprimento', user)


def test_description_required(user):
    register = service.open_register(user, '10.00')
    with pytest.raises(ValidationError):
        service.post_movement(register, ledger.DEPOSIT, '5.00', '', user)


def test_closed_register_rejects_movements_and_second_close(user):
    register = service.open_register(user, '0')
    service.close_register(register, '0')

    with pytest.raises(InvalidStateError):
        service.post_movement(register, ledger.DEPOSIT, '5.00', 'Suprimento', user)
    with pytest.raises(InvalidStateError):
        service.close_register(register, '0')


def test_only_one_open_register_per_organization(user, other_user):
    first = service.open_register(user, '0')

    with pytest.raises(ConflictError):
        service.open_register(user, '50.00')

    # outra organização abre o seu normalmente
    service.open_register(other_user, '0')

    service.close_register(first, '0')
    reopened = service.open_register(user, '20.00')
    assert service.current_register(user.organization) == reopened


def test_negative_initial_amount_rejected(user):
    with pytest.raises(ValidationError):
        service.open_register(user, '-1')


def test_movements_are_append_only(user):
    register = service.open_register(user, '0')
    movement = service.post_movement(register, ledger.DEPOSIT, '5.00', 'Suprimento', user)

    movement.value = Decimal('500.00')
    with pytest.raises(InvalidStateError):
        movement.save()
    with pytest.raises(InvalidStateError):
        movement.delete()

    assert CashMovement.objects.get(pk=movement.pk).value == Decimal('5.00')


def test_summary_totals(user):
    register = service.open_register(user, '100.00')
    service.post_movement(register, ledger.SALE, '50.00', 'Venda', user)
    service.post_movement(register, ledger.DEPOSIT, '20.00', 'Suprimento', user)
    service.post_movement(register, ledger.WITHDRAWAL, '30.00', 'Sangria', user)

    summary = service.summarize(register)

    assert summary['entries'] == Decimal('70.00')
    assert summary['exits'] == Decimal('30.00')
    assert summary['by_type'][ledger.SALE] == Decimal('50.00')
    assert summary['by_type'][ledger.WITHDRAWAL] == Decimal('-30.00')
    assert summary['balance'] == Decimal('140.00')
    assert summary['movements_count'] == 3


def test_random_movement_sequences_match_ledger(user):
    rng = random.Random(7)
    register = service.open_register(user, '50.00')
    expected = Decimal('50.00')

    for _ in range(60):
        movement_type = rng.choice([ledger.SALE, ledger.DEPOSIT, ledger.WITHDRAWAL, ledger.ADJUSTMENT])
        amount = Decimal(rng.randint(1, 8000)) / 100

        if movement_type == ledger.ADJUSTMENT and rng.random() < 0.5:
            amount = -amount

        try:
            service.post_movement(register, movement_type, amount, 'Aleatória', user)
        except InsufficientFundsError:
            assert expected - amount < 0
            continue

        expected += ledger.signed_value(movement_type, amount)

    assert register.balance == expected
    assert register.balance == ledger.register_balance(
        register.initial_amount, register.movements.values_list('type', 'value')
    )
