"""
services/receivable_status.py

Status da conta a receber em função do valor recebido.

    RECEIVED          se recebido >= total
    PARTIAL_RECEIVED  se 0 < recebido < total
    (status atual)    caso contrário

OVERDUE não é gravado: é derivado na leitura quando o vencimento passou e a
conta ainda não foi quitada, e tem precedência sobre OPEN e PARTIAL_RECEIVED.
"""

OPEN = 'OPEN'
PARTIAL_RECEIVED = 'PARTIAL_RECEIVED'
RECEIVED = 'RECEIVED'
OVERDUE = 'OVERDUE'


def compute_status(received_value, total_value, current_status=OPEN):
    if received_value >= total_value:
        return RECEIVED
    if received_value > 0:
        return PARTIAL_RECEIVED
    return current_status


def effective_status(status, due_date, today):
    if status != RECEIVED and due_date is not None and today > due_date:
        return OVERDUE
    return status
