from rest_framework.permissions import BasePermission


class RolePermission(BasePermission):
    """
    Role-based access for approved members.
    Superusers always pass.
    """
    allowed_roles = set()
    message = "You do not have permission to perform this action."

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated or not user.is_active:
            return False

        if user.is_superuser:
            return True

        if not getattr(user, "is_approved", False):
            return False

        return getattr(user, "role", None) in self.allowed_roles


class IsAdminOnly(RolePermission):
    allowed_roles = {"ADMIN"}
    message = "Only administrators can perform this action."


class IsApprovedUser(BasePermission):
    message = "You must be an approved member to perform this action."

    def has_permission(self, request, view):
        user = request.user
        return (
            user.is_authenticated
            and user.is_active
            and (user.is_superuser or getattr(user, "is_approved", False))
        )


class HasSavingsCategory(BasePermission):
    """
    Members must pick a savings category before they can see targets.
    """
    message = "Please select a SACCO category to continue."

    def has_permission(self, request, view):
        user = request.user
        if user.is_superuser:
            return True
        return bool(getattr(user, "savings_category", None))
