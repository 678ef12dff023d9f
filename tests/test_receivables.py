from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from gestao.exceptions import InvalidStateError, ValidationError
from gestao.models import CashMovement, Receivable
from gestao.services import cash_register
from gestao.services.receivable_status import compute_status, effective_status
from gestao.services.receivables import register_payment, update_total_value


@pytest.fixture
def receivable(organization, client_contact):
    return Receivable.objects.create(
        organization=organization,
        client=client_contact,
        description='Fiado março',
        due_date=timezone.localdate() + timedelta(days=10),
        total_value=Decimal('750.00'),
    )


def test_compute_status():
    assert compute_status(Decimal('0'), Decimal('750')) == 'OPEN'
    assert compute_status(Decimal('300'), Decimal('750')) == 'PARTIAL_RECEIVED'
    assert compute_status(Decimal('750'), Decimal('750')) == 'RECEIVED'


def test_effective_status_overdue_takes_precedence():
    today = date(2024, 5, 10)
    yesterday = date(2024, 5, 9)

    assert effective_status('OPEN', yesterday, today) == 'OVERDUE'
    assert effective_status('PARTIAL_RECEIVED', yesterday, today) == 'OVERDUE'
    assert effective_status('RECEIVED', yesterday, today) == 'RECEIVED'
    assert effective_status('OPEN', today, today) == 'OPEN'


@pytest.mark.django_db
def test_partial_then_full_payment(receivable, user):
    register_payment(receivable, '300.00', user)
    receivable.refresh_from_db()
    assert receivable.received_value == Decimal('300.00')
    assert receivable.status == Receivable.STATUS_PARTIAL_RECEIVED

    register_payment(receivable, '450.00', user)
    receivable.refresh_from_db()
    assert receivable.received_value == Decimal('750.00')
    assert receivable.status == Receivable.STATUS_RECEIVED
    assert receivable.outstanding_value == Decimal('0.00')


@pytest.mark.django_db
def test_overpayment_rejected(receivable, user):
    register_payment(receivable, '700.00', user)

    with pytest.raises(ValidationError):
        register_payment(receivable, '50.01', user)

    receivable.refresh_from_db()
    assert receivable.received_value == Decimal('700.00')


@pytest.mark.django_db
def test_paid_receivable_rejects_new_payment(receivable, user):
    register_payment(receivable, '750.00', user)
    with pytest.raises(InvalidStateError):
        register_payment(receivable, '1.00', user)


@pytest.mark.django_db
@pytest.mark.parametrize('value', ['0', '-10.00', 'abc'])
def test_invalid_payment_value(receivable, user, value):
    with pytest.raises(ValidationError):
        register_payment(receivable, value, user)


@pytest.mark.django_db
def test_payment_enters_open_register(receivable, user, cash_method):
    register = cash_register.open_register(user, '0')

    payment = register_payment(receivable, '300.00', user, payment_method=cash_method)

    movement = CashMovement.objects.get(receivable_payment=payment)
    assert movement.type == CashMovement.MovementType.RECEIVABLE_PAYMENT
    assert movement.value == Decimal('300.00')
    assert payment.cash_register == register
    assert register.balance == Decimal('300.00')


@pytest.mark.django_db
def test_payment_without_open_register_has_no_movement(receivable, user):
    payment = register_payment(receivable, '100.00', user)
    assert payment.cash_register is None
    assert not CashMovement.objects.exists()


@pytest.mark.django_db
def test_payments_are_immutable(receivable, user):
    payment = register_payment(receivable, '100.00', user)

    payment.value = Decimal('1.00')
    with pytest.raises(InvalidStateError):
        payment.save()
    with pytest.raises(InvalidStateError):
        payment.delete()


@pytest.mark.django_db
def test_total_cannot_drop_below_received(receivable, user):
    register_payment(receivable, '300.00', user)

    with pytest.raises(ValidationError):
        update_total_value(receivable, '299.99')

    updated = update_total_value(receivable, '300.00')
    assert updated.status == Receivable.STATUS_RECEIVED


@pytest.mark.django_db
def test_overdue_is_derived_on_read(receivable):
    receivable.due_date = timezone.localdate() - timedelta(days=1)
    receivable.save()

    receivable.refresh_from_db()
    assert receivable.status == Receivable.STATUS_OPEN
    assert receivable.effective_status == Receivable.STATUS_OVERDUE
    assert receivable.is_overdue
