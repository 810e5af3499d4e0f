from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.contrib.auth import get_user_model
from auth_app.models import (
    ClassificationQuizRole,
    ClassificationQuizVerification,
    WebConnectRole,
    WebConnectVerification,
)

User = get_user_model()

# unregister the built-in User admin first so the role inlines can be attached
try:
    admin.site.unregister(User)
except admin.sites.NotRegistered:
    pass


class ClassificationQuizRoleInline(admin.StackedInline):
    model = ClassificationQuizRole
    can_delete = True
    extra = 0


class WebConnectRoleInline(admin.StackedInline):
    model = WebConnectRole
    can_delete = True
    extra = 0


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    """
    Built-in User admin showing the primary key and both role rows inline,
    so an admin can grant trust without leaving the user page.
    """
    list_display = (
        'id',
        'username',
        'email',
        'is_staff',
        'is_active',
        'date_joined',
    )
    search_fields = ('username', 'email')
    list_filter = ('is_staff', 'is_superuser', 'is_active')
    readonly_fields = ('id',)
    inlines = (ClassificationQuizRoleInline, WebConnectRoleInline)

    fieldsets = (
        (None, {'fields': ('id', 'username', 'password')}),
        ('Personal info', {'fields': ('first_name', 'last_name', 'email')}),
        ('Permissions', {'fields': (
            'is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'
        )}),
        ('Important dates', {'fields': ('last_login', 'date_joined')}),
    )


@admin.register(ClassificationQuizVerification, WebConnectVerification)
class VerificationTokenAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'created_at', 'expires_at', 'verified_at')
    search_fields = ('user__username', 'user__email')
    readonly_fields = ('token',)
