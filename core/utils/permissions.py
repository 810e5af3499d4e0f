from rest_framework.permissions import BasePermission
from auth_app.models import ClassificationQuizRole, WebConnectRole


class _TrustedRolePermission(BasePermission):
    """Grants access to staff and to users whose role row is flagged trusted"""
    role_model = None

    def has_permission(self, request, view):
        # not logged in -> DRF answers 401
        if not request.user or not request.user.is_authenticated:
            return False
        if request.user.is_staff:
            return True
        return self.role_model.objects.filter(user=request.user, is_trusted=True).exists()


class IsTrustedClassificationQuiz(_TrustedRolePermission):
    message = 'Forbidden: only trusted classification quiz authors can do this.'
    role_model = ClassificationQuizRole


class IsTrustedWebConnect(_TrustedRolePermission):
    message = 'Forbidden: only trusted web connect members can submit projects.'
    role_model = WebConnectRole
