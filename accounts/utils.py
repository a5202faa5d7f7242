from django.contrib.auth.models import User

from .models import UserProfile


def user_summary(user: User, include_email: bool = False):
    """Compact representation of a person as embedded in API payloads."""
    if user is None:
        return None
    try:
        profile = user.profile
    except UserProfile.DoesNotExist:
        profile = None
    display_name = profile.full_name if profile else (user.get_full_name() or user.username)
    data = {
        'id': user.pk,
        'displayName': display_name,
        'avatar': profile.avatar if profile else display_name[:1].upper(),
        'avatarType': profile.avatar_type if profile else 'initial',
    }
    if include_email:
        data['email'] = user.email
    return data
