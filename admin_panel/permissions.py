from rest_framework.permissions import BasePermission


def _has_role(request, *roles):
    user = request.user
    return bool(user and user.is_authenticated and (user.role in roles or user.is_superuser))


class IsStudent(BasePermission):
    """Allow access only to students."""
    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == 'OGRENCI')


class IsAdvisor(BasePermission):
    """Allow access only to advisors."""
    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == 'DANISMAN')


class IsCareerCenter(BasePermission):
    """Allow access to career center staff and administrators."""
    def has_permission(self, request, view):
        return _has_role(request, 'KARIYER_MERKEZI', 'YONETICI')


class IsSystemAdmin(BasePermission):
    """Allow access only to administrators."""
    def has_permission(self, request, view):
        return _has_role(request, 'YONETICI')


class IsStaffMember(BasePermission):
    """Allow access to advisors, career center and administrators."""
    def has_permission(self, request, view):
        return _has_role(request, 'DANISMAN', 'KARIYER_MERKEZI', 'YONETICI')
