"""
services/order_totals.py

Cálculo do total do pedido a partir dos itens e da taxa de entrega.

    total_price (item) = quantidade × preço unitário
    total_value (pedido) = Σ total_price + taxa de entrega

Funções puras, sem acesso a banco; Order.recalculate_total() usa recompute()
dentro da mesma transação sempre que itens ou taxa mudam.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from gestao.exceptions import ValidationError

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')


# ─────────────────────────────────────────────────────────────────────────────
# COERÇÃO DE ENTRADAS
# ─────────────────────────────────────────────────────────────────────────────

def to_money(value, field='valor', allow_negative=False):
    """Converte para Decimal com 2 casas; rejeita vazio, NaN e negativo."""
    if value is None or value == '' or isinstance(value, bool):
        raise ValidationError(f'Informe o {field}.', {'field': field})

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f'{field} inválido: {value!r}.', {'field': field})

    if not amount.is_finite():
        raise ValidationError(f'{field} inválido: {value!r}.', {'field': field})

    if amount < 0 and not allow_negative:
        raise ValidationError(f'{field} não pode ser negativo.', {'field': field})

    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_quantity(value, field='quantidade'):
    """Quantidade inteira maior ou igual a 1."""
    if value is None or value == '' or isinstance(value, bool):
        raise ValidationError(f'Informe a {field}.', {'field': field})

    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f'{field} inválida: {value!r}.', {'field': field})

    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError(f'{field} deve ser um número inteiro.', {'field': field})

    if number < 1:
        raise ValidationError(f'{field} deve ser maior ou igual a 1.', {'field': field})

    return int(number)


# ─────────────────────────────────────────────────────────────────────────────
# CÁLCULO
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class OrderLine:
    product_id: object
    quantity: int
    unit_price: Decimal
    total_price: Decimal


@dataclass(frozen=True)
class OrderTotals:
    lines: tuple
    items_total: Decimal
    delivery_fee: Decimal
    total_value: Decimal


def line_total(quantity, unit_price):
    quantity = to_quantity(quantity)
    unit_price = to_money(unit_price, 'preço unitário')
    return (quantity * unit_price).quantize(CENTS, rounding=ROUND_HALF_UP)


def _get(item, name):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def recompute(items, delivery_fee=ZERO):
    """
    Recalcula cada item e o total do pedido.

    items: iterável de dicts (ou objetos) com product_id, quantity e unit_price.
    """
    fee = to_money(delivery_fee, 'taxa de entrega')

    lines = []
    for item in items:
        quantity = to_quantity(_get(item, 'quantity'))
        unit_price = to_money(_get(item, 'unit_price'), 'preço unitário')
        lines.append(OrderLine(
            product_id=_get(item, 'product_id'),
            quantity=quantity,
            unit_price=unit_price,
            total_price=(quantity * unit_price).quantize(CENTS, rounding=ROUND_HALF_UP),
        ))

    items_total = sum((line.total_price for line in lines), ZERO)

    return OrderTotals(
        lines=tuple(lines),
        items_total=items_total,
        delivery_fee=fee,
        total_value=items_total + fee,
    )


def sync_single_payment(payments, total_value):
    """
    Com uma única forma de pagamento, o valor acompanha o total do pedido
    enquanto o pagador não informar o valor explicitamente.

    payments: lista de dicts com 'value' (None quando não informado).
    """
    payments = [dict(p) for p in payments]

    if len(payments) == 1 and payments[0].get('value') is None:
        payments[0]['value'] = to_money(total_value, 'total do pedido')

    return payments
