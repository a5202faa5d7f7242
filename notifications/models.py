from django.db import models
from django.contrib.auth.models import User


class Notification(models.Model):
    """In-app notice shown to a single user"""

    KIND_CHOICES = [
        ('achievement', 'Achievement'),
        ('task', 'Task'),
        ('system', 'System'),
        ('friend_request', 'Friend Request'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=100)
    message = models.CharField(max_length=500)
    kind = models.CharField(max_length=20, choices=KIND_CHOICES)
    read = models.BooleanField(default=False, db_index=True)
    related_id = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='notif_user_created_idx'),
        ]

    def __str__(self):
        return f"{self.user.username}: {self.title}"
