from rest_framework.permissions import BasePermission


class HasActiveOrganization(BasePermission):
    """Só usuários vinculados a uma organização ativa acessam a API."""

    message = 'Usuário sem organização ativa.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(user.organization_id and user.organization.active)
