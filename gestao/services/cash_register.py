"""
services/cash_register.py

Ciclo de vida do caixa: abertura, lançamentos e fechamento.

  CLOSED/ausente --abrir--> OPEN --fechar--> CLOSED

Cada operação roda numa transação e relê o caixa com select_for_update
antes de recalcular o saldo, para que dois lançamentos simultâneos não
passem pela mesma checagem de saldo.
"""

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from gestao.exceptions import (
    ConflictError,
    InsufficientFundsError,
    InvalidStateError,
    ValidationError,
)
from gestao.models import CashMovement, CashRegister, Organization
from gestao.services import ledger
from gestao.services.order_totals import to_money

logger = logging.getLogger(__name__)


def current_register(organization):
    return CashRegister.objects.filter(
        organization=organization,
        status=CashRegister.STATUS_OPEN,
    ).first()


def _lock(register):
    return CashRegister.objects.select_for_update().get(pk=register.pk)


@transaction.atomic
def open_register(user, initial_amount):
    amount = to_money(initial_amount, 'valor inicial')

    # serializa aberturas concorrentes da mesma organização
    Organization.objects.select_for_update().get(pk=user.organization_id)

    if current_register(user.organization_id):
        raise ConflictError('Já existe um caixa aberto para esta organização.')

    try:
        with transaction.atomic():
            register = CashRegister.objects.create(
                organization_id=user.organization_id,
                user=user,
                status=CashRegister.STATUS_OPEN,
                opening_date=timezone.now(),
                initial_amount=amount,
            )
    except IntegrityError:
        raise ConflictError('Já existe um caixa aberto para esta organização.')

    logger.info(
        'Caixa %s aberto por %s com %s', register.pk, user.username, amount
    )
    return register


@transaction.atomic
def post_movement(register, movement_type, value, description, user,
                  payment_method=None, order=None, receivable_payment=None):
    register = _lock(register)

    if not register.is_open:
        raise InvalidStateError('O caixa está fechado; lançamentos não são permitidos.')

    if movement_type not in ledger.MOVEMENT_TYPES:
        raise ValidationError(f'Tipo de movimentação inválido: {movement_type}.', {'field': 'type'})

    if movement_type == ledger.ADJUSTMENT:
        amount = to_money(value, 'valor', allow_negative=True)
        if amount == 0:
            raise ValidationError('O valor do ajuste não pode ser zero.', {'field': 'value'})
    else:
        amount = to_money(value, 'valor')
        if amount <= 0:
            raise ValidationError('O valor deve ser maior que zero.', {'field': 'value'})

    if not description:
        raise ValidationError('Informe a descrição.', {'field': 'description'})

    if movement_type == ledger.WITHDRAWAL:
        balance = register.balance
        if balance - amount < 0:
            logger.warning(
                'Sangria de %s recusada no caixa %s (saldo %s)', amount, register.pk, balance
            )
            raise InsufficientFundsError(
                'Saldo insuficiente para a sangria.',
                {'balance': str(balance), 'value': str(amount)},
            )

    movement = CashMovement.objects.create(
        cash_register=register,
        type=movement_type,
        value=amount,
        description=description,
        payment_method=payment_method,
        order=order,
        receivable_payment=receivable_payment,
        user=user,
        movement_date=timezone.now(),
    )

    logger.info(
        'Movimentação %s de %s no caixa %s', movement_type, amount, register.pk
    )
    return movement


@transaction.atomic
def close_register(register, final_amount):
    """Fecha o caixa e devolve (caixa, diferença de conferência)."""
    register = _lock(register)

    if not register.is_open:
        raise InvalidStateError('O caixa já está fechado.')

    amount = to_money(final_amount, 'valor final')

    register.status = CashRegister.STATUS_CLOSED
    register.closing_date = timezone.now()
    register.final_amount = amount
    register.save(update_fields=['status', 'closing_date', 'final_amount'])

    difference = register.reconciliation_difference

    # divergência é informativa, não bloqueia o fechamento
    logger.info(
        'Caixa %s fechado: saldo %s, informado %s, diferença %s',
        register.pk, register.balance, amount, difference,
    )
    return register, difference


def summarize(register):
    movements = list(register.movements.values_list('type', 'value'))
    summary = ledger.summarize_movements(movements)

    return {
        'initial_amount': register.initial_amount,
        'entries': summary['entries'],
        'exits': summary['exits'],
        'by_type': summary['by_type'],
        'balance': ledger.register_balance(register.initial_amount, movements),
        'final_amount': register.final_amount,
        'reconciliation_difference': register.reconciliation_difference,
        'movements_count': len(movements),
    }
