from django.db import models
from django.contrib.auth.models import User
from django.utils import timezone


ROLE_OWNER = 'owner'
ROLE_EDITOR = 'editor'
ROLE_VIEWER = 'viewer'


class SharedPlan(models.Model):
    """Collaborative task list with one owner and any number of members"""

    name = models.CharField(max_length=100, verbose_name="Name")
    description = models.CharField(max_length=500, blank=True, default='', verbose_name="Description")
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='owned_shared_plans', verbose_name="Owner")
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="Created at")
    updated_at = models.DateTimeField(auto_now=True, verbose_name="Updated at")

    class Meta:
        verbose_name = "Shared Plan"
        verbose_name_plural = "Shared Plans"
        ordering = ['-updated_at']

    def __str__(self):
        return self.name

    @property
    def task_count(self):
        return self.tasks.count()

    @property
    def completed_task_count(self):
        return self.tasks.filter(status=PlanTask.STATUS_COMPLETED).count()

    def touch(self):
        """Bump ``updated_at`` after a change to members or tasks."""
        self.save(update_fields=['updated_at'])


class PlanMembership(models.Model):
    # The owner is never stored here; see SharedPlan.owner
    ROLE_CHOICES = [
        (ROLE_EDITOR, 'Editor'),
        (ROLE_VIEWER, 'Viewer'),
    ]
    plan = models.ForeignKey(SharedPlan, on_delete=models.CASCADE, related_name='memberships')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='shared_plan_memberships')
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_EDITOR)
    invited_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    joined_at = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = ('plan', 'user')
        ordering = ['joined_at', 'id']
        verbose_name = 'Plan Membership'
        verbose_name_plural = 'Plan Memberships'

    def __str__(self):
        return f"{self.user.username} @ {self.plan.name} ({self.role})"


class PlanTask(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    plan = models.ForeignKey(SharedPlan, on_delete=models.CASCADE, related_name='tasks')
    title = models.CharField(max_length=200)
    description = models.CharField(max_length=1000, blank=True, default='')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    assigned_to = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_plan_tasks')
    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name='created_plan_tasks')
    created_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['created_at', 'id']
        verbose_name = 'Plan Task'
        verbose_name_plural = 'Plan Tasks'

    def __str__(self):
        return f"{self.title} ({self.status})"

    @property
    def is_completed(self):
        return self.status == self.STATUS_COMPLETED

    def set_status(self, status):
        """Change status keeping ``completed_at`` set exactly while completed."""
        if status == self.STATUS_COMPLETED:
            if not self.is_completed or self.completed_at is None:
                self.completed_at = timezone.now()
        else:
            self.completed_at = None
        self.status = status


class PlanInvitation(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUS_DECLINED = 'declined'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_DECLINED, 'Declined'),
    ]

    plan = models.ForeignKey(SharedPlan, on_delete=models.CASCADE, related_name='invitations')
    invited_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name='plan_invites_sent')
    invited_user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='plan_invites_received')
    role = models.CharField(max_length=10, choices=PlanMembership.ROLE_CHOICES, default=ROLE_EDITOR)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['plan', 'invited_user'],
                condition=models.Q(status='pending'),
                name='unique_pending_plan_invitation',
            ),
        ]

    def __str__(self):
        return f"Invite {self.invited_user.username} to {self.plan.name} ({self.role}, {self.status})"

    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING


class PlanMessage(models.Model):
    """Append-only discussion entry"""

    plan = models.ForeignKey(SharedPlan, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(User, on_delete=models.CASCADE, related_name='plan_messages')
    content = models.TextField(max_length=2000)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['plan', '-created_at'], name='planmsg_plan_created_idx'),
        ]

    def __str__(self):
        return f"{self.sender.username} @ {self.plan.name}: {self.content[:30]}"
