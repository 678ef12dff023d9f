"""
services/idempotency.py

Deduplicação de requisições financeiras reenviadas (Idempotency-Key).

Checagem em dois níveis:
  A) aplicação: consulta a chave antes de executar
  B) banco: IntegrityError na constraint única quando duas requisições
     com a mesma chave correm juntas; a segunda é desfeita e recebe a
     resposta gravada pela primeira

Só respostas 2xx são gravadas: uma requisição que falhou pode ser
reenviada com a mesma chave.
"""

import logging
from functools import wraps

from django.conf import settings
from django.db import IntegrityError, transaction
from rest_framework.response import Response

from gestao.exceptions import ConflictError, ValidationError
from gestao.models import IdempotencyKey

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH = 255


class _DuplicateKey(Exception):
    pass


def _endpoint(request):
    return f'{request.method} {request.path}'


def _replay(stored, endpoint):
    if stored.endpoint != endpoint:
        raise ConflictError(
            'Idempotency-Key já usada em outra operação.',
            {'endpoint': stored.endpoint},
        )
    logger.warning('Requisição repetida (%s) em %s; devolvendo resposta gravada', stored.key, endpoint)
    response = Response(stored.response_body, status=stored.response_status)
    response['Idempotent-Replayed'] = 'true'
    return response


def idempotent(view_method):
    """Decorator para ações de ViewSet que alteram dados financeiros."""

    @wraps(view_method)
    def wrapper(self, request, *args, **kwargs):
        key = request.META.get(getattr(settings, 'IDEMPOTENCY_HEADER', 'HTTP_IDEMPOTENCY_KEY'))
        if not key:
            return view_method(self, request, *args, **kwargs)

        if len(key) > MAX_KEY_LENGTH:
            raise ValidationError('Idempotency-Key muito longa.')

        organization_id = request.user.organization_id
        endpoint = _endpoint(request)

        try:
            with transaction.atomic():
                stored = (
                    IdempotencyKey.objects.select_for_update()
                    .filter(organization_id=organization_id, key=key)
                    .first()
                )
                if stored is not None:
                    return _replay(stored, endpoint)

                response = view_method(self, request, *args, **kwargs)

                if 200 <= response.status_code < 300:
                    try:
                        with transaction.atomic():
                            IdempotencyKey.objects.create(
                                organization_id=organization_id,
                                key=key,
                                endpoint=endpoint,
                                response_status=response.status_code,
                                response_body=response.data,
                            )
                    except IntegrityError:
                        # desfaz os efeitos desta execução
                        raise _DuplicateKey()

                return response
        except _DuplicateKey:
            stored = IdempotencyKey.objects.get(organization_id=organization_id, key=key)
            return _replay(stored, endpoint)

    return wrapper
