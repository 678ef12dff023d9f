"""
services/receivables.py

Registro de recebimentos de contas a receber.

O pagamento é um lançamento imutável; o valor recebido é sempre a soma
dos pagamentos e o status é recalculado a partir dele. Havendo caixa
aberto na organização, o recebimento entra no caixa como
RECEIVABLE_PAYMENT.
"""

import logging

from django.db import transaction
from django.utils import timezone

from gestao.exceptions import InvalidStateError, ValidationError
from gestao.models import Receivable, ReceivablePayment
from gestao.services import ledger
from gestao.services.cash_register import current_register, post_movement
from gestao.services.order_totals import to_money
from gestao.services.receivable_status import compute_status

logger = logging.getLogger(__name__)


def validate_total_value(receivable, total_value):
    """Novo total não pode ficar abaixo do que já foi recebido."""
    total = to_money(total_value, 'valor total')
    if total <= 0:
        raise ValidationError('O valor total deve ser maior que zero.', {'field': 'total_value'})
    if receivable is not None and total < receivable.received_value:
        raise ValidationError(
            'O valor total não pode ser menor que o valor já recebido.',
            {'received_value': str(receivable.received_value)},
        )
    return total


@transaction.atomic
def update_total_value(receivable, total_value):
    receivable = Receivable.objects.select_for_update().get(pk=receivable.pk)
    receivable.total_value = validate_total_value(receivable, total_value)
    receivable.status = compute_status(receivable.received_value, receivable.total_value, receivable.status)
    receivable.save(update_fields=['total_value', 'status', 'updated_at'])
    return receivable


@transaction.atomic
def register_payment(receivable, value, user, payment_date=None, observation='', payment_method=None):
    receivable = Receivable.objects.select_for_update().get(pk=receivable.pk)

    amount = to_money(value, 'valor do pagamento')
    if amount <= 0:
        raise ValidationError('O valor do pagamento deve ser maior que zero.', {'field': 'value'})

    if receivable.status == Receivable.STATUS_RECEIVED:
        raise InvalidStateError('Esta conta já está quitada.')

    if amount > receivable.outstanding_value:
        raise ValidationError(
            'O pagamento excede o valor pendente.',
            {'outstanding_value': str(receivable.outstanding_value)},
        )

    register = current_register(receivable.organization_id)

    payment = ReceivablePayment.objects.create(
        receivable=receivable,
        cash_register=register,
        payment_method=payment_method,
        payment_date=payment_date or timezone.now(),
        value=amount,
        observation=observation or '',
        created_by=user,
    )

    if register is not None:
        post_movement(
            register,
            ledger.RECEIVABLE_PAYMENT,
            amount,
            f'Recebimento - {receivable.client.name}',
            user,
            payment_method=payment_method,
            receivable_payment=payment,
        )

    receivable.refresh_totals()

    logger.info(
        'Recebimento de %s na conta %s: recebido %s de %s (%s)',
        amount, receivable.pk, receivable.received_value,
        receivable.total_value, receivable.status,
    )
    return payment
