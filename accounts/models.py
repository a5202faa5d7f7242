from django.db import models
from django.contrib.auth.models import User
import secrets


class UserProfile(models.Model):
    """Public-facing profile rendered wherever a person appears in a payload."""

    AVATAR_TYPES = [
        ('initial', 'Initial'),
        ('photo', 'Photo'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile', verbose_name="User")
    display_name = models.CharField(max_length=100, blank=True, verbose_name="Display name")
    avatar = models.CharField(max_length=500, blank=True, verbose_name="Avatar")
    avatar_type = models.CharField(max_length=10, choices=AVATAR_TYPES, default='initial', verbose_name="Avatar type")
    bio = models.TextField(max_length=500, blank=True, verbose_name="Bio")

    created_at = models.DateTimeField(auto_now_add=True, verbose_name="Created at")
    updated_at = models.DateTimeField(auto_now=True, verbose_name="Updated at")

    class Meta:
        verbose_name = "User Profile"
        verbose_name_plural = "User Profiles"

    def __str__(self):
        return f"Profile of {self.full_name}"

    @property
    def full_name(self):
        return self.display_name or self.user.get_full_name() or self.user.username

    def save(self, *args, **kwargs):
        if not self.avatar and self.avatar_type == 'initial':
            self.avatar = (self.full_name[:1] or '?').upper()
        return super().save(*args, **kwargs)


class APIToken(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='api_tokens')
    name = models.CharField(max_length=100, blank=True)
    key = models.CharField(max_length=40, unique=True, db_index=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    last_used_at = models.DateTimeField(null=True, blank=True)

    def save(self, *args, **kwargs):
        if not self.key:
            self.key = secrets.token_hex(20)
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.user.username} - {self.name or self.key[:6]}"
