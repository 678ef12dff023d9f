"""
services/ledger.py

Efeito de cada movimentação no saldo do caixa.

    saldo = valor inicial + Σ valores com sinal

Entradas: SALE, RECEIVABLE_PAYMENT, DEPOSIT e ADJUSTMENT positivo.
Saídas:   WITHDRAWAL e ADJUSTMENT negativo (subtraem o valor absoluto).
"""

from gestao.services.order_totals import ZERO, to_money

SALE = 'SALE'
RECEIVABLE_PAYMENT = 'RECEIVABLE_PAYMENT'
WITHDRAWAL = 'WITHDRAWAL'
DEPOSIT = 'DEPOSIT'
ADJUSTMENT = 'ADJUSTMENT'

INFLOW_TYPES = (SALE, RECEIVABLE_PAYMENT, DEPOSIT)
MOVEMENT_TYPES = (SALE, RECEIVABLE_PAYMENT, WITHDRAWAL, DEPOSIT, ADJUSTMENT)


def signed_value(movement_type, value):
    amount = to_money(value, 'valor', allow_negative=True)

    if movement_type in INFLOW_TYPES:
        return abs(amount)
    if movement_type == WITHDRAWAL:
        return -abs(amount)
    if movement_type == ADJUSTMENT:
        return amount

    raise ValueError(f'Tipo de movimentação desconhecido: {movement_type}')


def register_balance(initial_amount, movements):
    """movements: pares (tipo, valor)."""
    balance = to_money(initial_amount, 'valor inicial')
    for movement_type, value in movements:
        balance += signed_value(movement_type, value)
    return balance


def summarize_movements(movements):
    """Totais por tipo, entradas e saídas. movements: pares (tipo, valor)."""
    by_type = {movement_type: ZERO for movement_type in MOVEMENT_TYPES}
    entries = ZERO
    exits = ZERO

    for movement_type, value in movements:
        amount = signed_value(movement_type, value)
        by_type[movement_type] += amount
        if amount >= 0:
            entries += amount
        else:
            exits += -amount

    return {'by_type': by_type, 'entries': entries, 'exits': exits}
