"""
gestao/exceptions.py

Exceções de regra de negócio e o mapeamento delas para respostas HTTP.

Toda violação de regra é lançada pelos serviços como uma subclasse de
BusinessRuleError. O handler da API converte em 4xx com payload estruturado;
qualquer outra falha vira 500 sem detalhes internos.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# EXCEÇÕES
# ─────────────────────────────────────────────────────────────────────────────

class BusinessRuleError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'business_rule'

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def as_payload(self):
        return {
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details,
            }
        }


class ValidationError(BusinessRuleError):
    """Entrada numérica malformada ou fora do intervalo permitido."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'validation_error'


class NotFoundError(BusinessRuleError):
    """Entidade inexistente ou de outra organização."""
    status_code = status.HTTP_404_NOT_FOUND
    code = 'not_found'


class InvalidStateError(BusinessRuleError):
    """Operação tentada num estado que não a permite."""
    status_code = status.HTTP_409_CONFLICT
    code = 'invalid_state'


class ConflictError(BusinessRuleError):
    """Registro duplicado, ex.: abrir um caixa com outro já aberto."""
    status_code = status.HTTP_409_CONFLICT
    code = 'conflict'


class InsufficientFundsError(BusinessRuleError):
    """Sangria maior que o saldo do caixa."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = 'insufficient_funds'


# ─────────────────────────────────────────────────────────────────────────────
# HANDLER DRF
# ─────────────────────────────────────────────────────────────────────────────

def api_exception_handler(exc, context):
    # models importam este módulo; DRF só é carregado quando há requisição
    from rest_framework.response import Response
    from rest_framework.views import exception_handler

    if isinstance(exc, BusinessRuleError):
        return Response(exc.as_payload(), status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        payload = {
            'error': {
                'code': ValidationError.code,
                'message': '; '.join(exc.messages),
                'details': exc.message_dict if hasattr(exc, 'error_dict') else {},
            }
        }
        return Response(payload, status=status.HTTP_400_BAD_REQUEST)

    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, Http404):
            response.data = NotFoundError('Registro não encontrado.').as_payload()
        return response

    view = context.get('view')
    logger.error(
        'Erro inesperado em %s', view.__class__.__name__ if view else 'API',
        exc_info=exc,
    )
    return Response(
        {'error': {'code': 'internal_error', 'message': 'Erro interno do servidor.', 'details': {}}},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
