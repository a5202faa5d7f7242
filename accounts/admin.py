from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from .models import UserProfile, APIToken


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False
    verbose_name_plural = 'Profile'


class UserAdmin(BaseUserAdmin):
    inlines = (UserProfileInline,)
    list_display = ('username', 'email', 'first_name', 'last_name', 'is_staff', 'date_joined')
    list_filter = ('is_staff', 'is_superuser', 'is_active', 'date_joined')


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'display_name', 'avatar_type', 'created_at']
    list_filter = ['avatar_type', 'created_at']
    search_fields = ['user__username', 'user__email', 'display_name']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-created_at']


@admin.register(APIToken)
class APITokenAdmin(admin.ModelAdmin):
    list_display = ['user', 'name', 'is_active', 'created_at', 'last_used_at']
    list_filter = ['is_active']
    search_fields = ['user__username', 'user__email', 'name']
    readonly_fields = ['key', 'created_at', 'last_used_at']


# Re-register UserAdmin
admin.site.unregister(User)
admin.site.register(User, UserAdmin)
