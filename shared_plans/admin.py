from django.contrib import admin
from .models import SharedPlan, PlanMembership, PlanTask, PlanInvitation, PlanMessage


class PlanMembershipInline(admin.TabularInline):
    model = PlanMembership
    extra = 0
    fk_name = 'plan'
    raw_id_fields = ['user', 'invited_by']


class PlanTaskInline(admin.TabularInline):
    model = PlanTask
    extra = 0
    fields = ['title', 'status', 'assigned_to', 'created_by', 'created_at', 'completed_at']
    readonly_fields = ['created_at', 'completed_at']
    raw_id_fields = ['assigned_to', 'created_by']


@admin.register(SharedPlan)
class SharedPlanAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'created_at', 'updated_at', 'task_count', 'completed_task_count']
    list_filter = ['created_at']
    search_fields = ['name', 'description', 'owner__username', 'owner__email']
    readonly_fields = ['created_at', 'updated_at', 'task_count', 'completed_task_count']
    ordering = ['-updated_at']
    inlines = [PlanMembershipInline, PlanTaskInline]

    fieldsets = (
        ('Basics', {
            'fields': ('name', 'description', 'owner')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
        ('Statistics', {
            'fields': ('task_count', 'completed_task_count'),
            'classes': ('collapse',)
        }),
    )


@admin.register(PlanInvitation)
class PlanInvitationAdmin(admin.ModelAdmin):
    list_display = ['plan', 'invited_user', 'invited_by', 'role', 'status', 'created_at']
    list_filter = ['status', 'role', 'created_at']
    search_fields = ['plan__name', 'invited_user__username', 'invited_by__username']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(PlanMessage)
class PlanMessageAdmin(admin.ModelAdmin):
    list_display = ['plan', 'sender', 'content', 'created_at']
    list_filter = ['created_at']
    search_fields = ['plan__name', 'sender__username', 'content']
    readonly_fields = ['plan', 'sender', 'content', 'created_at']
