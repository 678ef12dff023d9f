from django.http import JsonResponse


class OrganizationRequiredMiddleware:
    """
    - Bloqueia usuário sem organização
    - Bloqueia organização inativa
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):

        user = getattr(request, 'user', None)

        if user is not None and user.is_authenticated and request.path.startswith('/api/'):

            if not user.organization_id:
                return self._forbidden('Usuário sem organização vinculada.')

            if not user.organization.active:
                return self._forbidden('Organização inativa. Contate o suporte.')

        return self.get_response(request)

    def _forbidden(self, message):
        return JsonResponse(
            {'error': {'code': 'forbidden', 'message': message, 'details': {}}},
            status=403,
        )
