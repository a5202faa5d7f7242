from django.conf import settings
from django.utils import timezone
from rest_framework.authentication import BaseAuthentication
from rest_framework import exceptions
from .models import APIToken


class TokenAuthentication(BaseAuthentication):
    """Resolve the caller from ``Authorization: Token <key>`` or the auth cookie."""

    keyword = 'Token'

    def authenticate(self, request):
        key = self._key_from_header(request)
        if key is None:
            key = request.COOKIES.get(settings.AUTH_COOKIE_NAME) or None
        if key is None:
            return None
        try:
            token = APIToken.objects.select_related('user').get(key=key, is_active=True)
        except APIToken.DoesNotExist:
            raise exceptions.AuthenticationFailed('Invalid token')
        if not token.user.is_active:
            raise exceptions.AuthenticationFailed('User inactive or deleted')
        APIToken.objects.filter(pk=token.pk).update(last_used_at=timezone.now())
        return (token.user, token)

    def authenticate_header(self, request):
        return self.keyword

    def _key_from_header(self, request):
        auth = request.headers.get('Authorization') or ''
        parts = auth.split()
        if len(parts) != 2 or parts[0] != self.keyword:
            return None
        return parts[1]
