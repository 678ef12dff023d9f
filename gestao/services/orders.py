"""
services/orders.py

Gravação de pedidos com itens e pagamentos, e transições de status.

Fluxo de gravação (sempre numa única transação):
  1. Grava cabeçalho (cliente, endereço, taxa de entrega)
  2. Regrava itens; cada OrderItem recalcula o próprio total
  3. Recalcula o total do pedido
  4. Rateia o total entre as formas de pagamento e calcula o troco

Ao concluir o pedido:
  - pagamentos comuns viram SALE no caixa aberto (valor - troco)
  - pagamentos "a receber" viram contas a receber
  - estoque dos produtos é baixado
"""

import logging
from datetime import timedelta

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from gestao.exceptions import InvalidStateError, ValidationError
from gestao.models import (
    Delivery,
    Order,
    OrderItem,
    OrderPayment,
    PaymentMethod,
    PriceTable,
    Product,
    Receivable,
)
from gestao.services import ledger
from gestao.services import payments as allocator
from gestao.services.cash_register import current_register, post_movement
from gestao.services.order_totals import sync_single_payment, to_money

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# AUXILIARES
# ─────────────────────────────────────────────────────────────────────────────

def _lock(order):
    return Order.objects.select_for_update().get(pk=order.pk)


def _check_client_address(order):
    if order.client.status != order.client.STATUS_ACTIVE:
        raise ValidationError('Cliente inativo.', {'field': 'client'})
    if order.address.contact_id != order.client_id:
        raise ValidationError('O endereço não pertence ao cliente do pedido.', {'field': 'address'})


def resolve_unit_price(order, product, unit_price=None):
    """Preço informado ou, na falta dele, o da tabela do pedido / tabela padrão."""
    if unit_price is not None:
        return to_money(unit_price, 'preço unitário')

    table = order.price_table or PriceTable.objects.filter(
        organization_id=order.organization_id,
        is_default=True,
    ).first()

    price = table.price_for(product) if table else None
    if price is None:
        raise ValidationError(
            f'Sem preço para o produto {product.name}; informe o preço unitário.',
            {'product': product.pk},
        )
    return price


def _write_items(order, items):
    order.items.all().delete()

    for item in items:
        OrderItem.objects.create(
            order=order,
            product=item['product'],
            quantity=item['quantity'],
            unit_price=resolve_unit_price(order, item['product'], item.get('unit_price')),
        )


def _cash_method_ids(methods):
    return [m.pk for m in methods if m.is_cash]


def _persist_payments(order, lines, methods):
    """lines: dicts/PaymentLine com payment_method_id e value."""
    allocation = allocator.allocate(order.total_value, lines, _cash_method_ids(methods.values()))

    order.payments.all().delete()
    for line in allocation.lines:
        OrderPayment.objects.create(
            order=order,
            payment_method=methods[line.payment_method_id],
            value=line.value,
            change=line.change,
        )
    return allocation


def _check_method(order, method):
    if method.organization_id != order.organization_id or not method.active:
        raise ValidationError('Forma de pagamento inválida.', {'payment_method': method.pk})


def _save_payments(order, payments):
    if not payments:
        raise ValidationError('Adicione pelo menos uma forma de pagamento.')

    methods = {}
    lines = []
    for payment in payments:
        method = payment['payment_method']
        _check_method(order, method)
        methods[method.pk] = method
        lines.append({'payment_method_id': method.pk, 'value': payment.get('value')})

    lines = sync_single_payment(lines, order.total_value)
    return _persist_payments(order, lines, methods)


def _resync_payments(order):
    current = list(order.payments.select_related('payment_method'))
    if not current:
        return None

    methods = {p.payment_method_id: p.payment_method for p in current}
    lines = [{'payment_method_id': p.payment_method_id, 'value': p.value} for p in current]

    if len(lines) == 1:
        lines[0]['value'] = order.total_value

    return _persist_payments(order, lines, methods)


# ─────────────────────────────────────────────────────────────────────────────
# CRIAÇÃO / EDIÇÃO
# ─────────────────────────────────────────────────────────────────────────────

@transaction.atomic
def create_order(user, data):
    data = dict(data)
    items = data.pop('items', [])
    payments = data.pop('payments', [])

    order = Order(organization_id=user.organization_id, **data)
    order.delivery_fee = to_money(order.delivery_fee, 'taxa de entrega')
    _check_client_address(order)
    order.save()

    _write_items(order, items)
    order.recalculate_total()
    allocation = _save_payments(order, payments)

    logger.info('Pedido %s criado: total %s, troco %s', order.pk, order.total_value, allocation.change)
    return order


@transaction.atomic
def update_order(order, data):
    order = _lock(order)

    if not order.can_edit():
        raise InvalidStateError('Este pedido não pode mais ser alterado.')

    data = dict(data)
    items = data.pop('items', None)
    payments = data.pop('payments', None)
    totals_changed = items is not None or 'delivery_fee' in data

    for name, value in data.items():
        setattr(order, name, value)

    order.delivery_fee = to_money(order.delivery_fee, 'taxa de entrega')
    _check_client_address(order)
    order.save()

    if items is not None:
        _write_items(order, items)

    order.recalculate_total()

    if payments is not None:
        _save_payments(order, payments)
    elif totals_changed:
        _resync_payments(order)

    return order


@transaction.atomic
def add_payment(order, payment_method, value=None):
    order = _lock(order)

    if not order.can_edit():
        raise InvalidStateError('Este pedido não pode mais ser alterado.')

    _check_method(order, payment_method)

    current = list(order.payments.select_related('payment_method'))
    methods = {p.payment_method_id: p.payment_method for p in current}
    methods[payment_method.pk] = payment_method

    lines = allocator.add_payment_method(current, payment_method.pk, order.total_value, value)
    _persist_payments(order, lines, methods)
    return order


@transaction.atomic
def remove_payment(order, payment_method_id):
    order = _lock(order)

    if not order.can_edit():
        raise InvalidStateError('Este pedido não pode mais ser alterado.')

    current = list(order.payments.select_related('payment_method'))
    methods = {p.payment_method_id: p.payment_method for p in current}

    lines = allocator.remove_payment_method(current, payment_method_id)

    # volta a acompanhar o total quando sobra uma única forma
    if len(lines) == 1:
        lines = [allocator.PaymentLine(lines[0].payment_method_id, order.total_value)]

    _persist_payments(order, lines, methods)
    return order


# ─────────────────────────────────────────────────────────────────────────────
# STATUS
# ─────────────────────────────────────────────────────────────────────────────

def _generate_financial(order, user):
    """Lança as vendas no caixa e gera as contas a receber. Idempotente."""
    if order.cash_movements.exists() or order.receivables.exists():
        return

    payments = list(order.payments.select_related('payment_method'))
    allocator.allocate(
        order.total_value,
        payments,
        _cash_method_ids(p.payment_method for p in payments),
    )

    register = None
    for payment in payments:
        method = payment.payment_method
        value = payment.net_value
        if value <= 0:
            continue

        if method.type == PaymentMethod.MethodType.RECEIVABLE:
            Receivable.objects.create(
                organization_id=order.organization_id,
                client=order.client,
                order=order,
                description=f'Pedido #{order.pk}',
                due_date=timezone.localdate(order.order_date) + timedelta(days=method.due_days),
                total_value=value,
            )
            continue

        if register is None:
            register = current_register(order.organization_id)
            if register is None:
                raise InvalidStateError('Abra o caixa antes de concluir o pedido.')

        post_movement(
            register,
            ledger.SALE,
            value,
            f'Pedido #{order.pk}',
            user,
            payment_method=method,
            order=order,
        )


def _finalize_stock(order):
    for item in order.items.all():
        Product.objects.filter(pk=item.product_id).update(
            current_stock=F('current_stock') - item.quantity
        )


@transaction.atomic
def change_status(order, new_status, user, delivery_person=None):
    order = _lock(order)

    if not order.can_change_status_to(new_status):
        raise InvalidStateError(
            f'Não é permitido mudar de {order.get_status_display()} '
            f'para {dict(Order.STATUS_CHOICES).get(new_status, new_status)}.'
        )

    now = timezone.now()

    if new_status == Order.STATUS_DELIVERING:
        if delivery_person is not None and not delivery_person.is_delivery_person:
            raise ValidationError('O contato informado não é entregador.', {'field': 'delivery_person'})
        Delivery.objects.update_or_create(
            order=order,
            defaults={
                'assigned_by': user,
                'delivery_person': delivery_person,
                'departure_datetime': now,
            },
        )
    elif new_status == Order.STATUS_DELIVERED:
        delivery = Delivery.objects.filter(order=order).first() or Delivery(order=order, assigned_by=user)
        delivery.delivery_datetime = now
        delivery.save()
    elif new_status == Order.STATUS_COMPLETED:
        _generate_financial(order, user)
        _finalize_stock(order)

    old_status = order.status
    order.status = new_status
    order.save(update_fields=['status', 'updated_at'])

    logger.info('Pedido %s: %s -> %s', order.pk, old_status, new_status)
    return order


def advance_status(order, user, delivery_person=None):
    next_status = order.next_status()
    if not next_status:
        raise InvalidStateError('Pedido já está no status final.')
    return change_status(order, next_status, user, delivery_person=delivery_person)


def cancel_order(order, user):
    return change_status(order, Order.STATUS_CANCELED, user)
