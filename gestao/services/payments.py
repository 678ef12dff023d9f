"""
services/payments.py

Rateio do total do pedido entre uma ou mais formas de pagamento.

Regras:
  - Σ valores >= total do pedido, senão "pagamento insuficiente"
  - troco = max(0, total pago - total) somente na forma do tipo dinheiro
    (a primeira, se houver mais de uma); demais formas têm troco 0
  - uma forma de pagamento não se repete no mesmo pedido
  - sempre ao menos uma forma de pagamento
"""

from dataclasses import dataclass, field
from decimal import Decimal

from gestao.exceptions import ValidationError
from gestao.services.order_totals import ZERO, to_money


@dataclass(frozen=True)
class PaymentLine:
    payment_method_id: object
    value: Decimal
    change: Decimal = ZERO


@dataclass(frozen=True)
class Allocation:
    total_value: Decimal
    total_paid: Decimal
    lines: tuple = field(default_factory=tuple)

    @property
    def change(self):
        return sum((line.change for line in self.lines), ZERO)


def _as_line(payment):
    if isinstance(payment, PaymentLine):
        return payment
    if isinstance(payment, dict):
        method_id = payment.get('payment_method_id')
        value = payment.get('value')
    else:
        method_id = getattr(payment, 'payment_method_id', None)
        value = getattr(payment, 'value', None)

    if method_id is None:
        raise ValidationError('Forma de pagamento não informada.', {'field': 'payment_method'})

    return PaymentLine(payment_method_id=method_id, value=to_money(value, 'valor do pagamento'))


def _ensure_unique(lines):
    seen = set()
    for line in lines:
        if line.payment_method_id in seen:
            raise ValidationError(
                'Forma de pagamento repetida no pedido.',
                {'payment_method': line.payment_method_id},
            )
        seen.add(line.payment_method_id)


def total_paid(payments):
    return sum((_as_line(p).value for p in payments), ZERO)


def remaining_balance(total_value, payments):
    remaining = to_money(total_value, 'total do pedido') - total_paid(payments)
    return remaining if remaining > 0 else ZERO


def allocate(total_value, payments, cash_method_ids=()):
    """
    Valida o rateio e calcula o troco.

    cash_method_ids: ids das formas de pagamento do tipo dinheiro.
    """
    total = to_money(total_value, 'total do pedido')
    lines = [_as_line(p) for p in payments]

    if not lines:
        raise ValidationError('Adicione pelo menos uma forma de pagamento.')

    _ensure_unique(lines)

    paid = sum((line.value for line in lines), ZERO)
    if paid < total:
        raise ValidationError(
            'insufficient payment',
            {'total_value': str(total), 'total_paid': str(paid), 'missing': str(total - paid)},
        )

    change = paid - total
    cash_ids = set(cash_method_ids)
    change_assigned = False
    allocated = []

    for line in lines:
        line_change = ZERO
        if line.payment_method_id in cash_ids and not change_assigned:
            line_change = change
            change_assigned = True
        allocated.append(PaymentLine(line.payment_method_id, line.value, line_change))

    return Allocation(total_value=total, total_paid=paid, lines=tuple(allocated))


def add_payment_method(payments, method_id, total_value, value=None):
    """Inclui uma nova forma; sem valor informado assume o saldo restante."""
    lines = [_as_line(p) for p in payments]

    if any(line.payment_method_id == method_id for line in lines):
        raise ValidationError(
            'Esta forma de pagamento já foi adicionada ao pedido.',
            {'payment_method': method_id},
        )

    if value is None:
        value = remaining_balance(total_value, lines)

    lines.append(PaymentLine(payment_method_id=method_id, value=to_money(value, 'valor do pagamento')))
    return lines


def remove_payment_method(payments, method_id):
    lines = [_as_line(p) for p in payments]

    if not any(line.payment_method_id == method_id for line in lines):
        raise ValidationError(
            'Forma de pagamento não está no pedido.',
            {'payment_method': method_id},
        )

    if len(lines) == 1:
        raise ValidationError('O pedido precisa de pelo menos uma forma de pagamento.')

    return [line for line in lines if line.payment_method_id != method_id]
