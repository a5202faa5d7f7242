import logging

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from companion.utils import request_body

from .forms import EmailAuthenticationForm, EmailRegistrationForm
from .models import APIToken
from .utils import user_summary


logger = logging.getLogger(__name__)


class LoginThrottle(AnonRateThrottle):
    rate = '30/min'


def _form_error(form):
    for field, errors in form.errors.items():
        if field == '__all__':
            return errors[0]
        return f"{field}: {errors[0]}"
    return 'Invalid request'


def _issue_token(user, name):
    token = APIToken.objects.create(user=user, name=name)
    response = Response({'user': user_summary(user, include_email=True)})
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token.key,
        httponly=True,
        samesite='Lax',
        secure=getattr(settings, 'AUTH_COOKIE_SECURE', False),
    )
    return response


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginThrottle])
def register(request):
    data = request_body(request)
    form = EmailRegistrationForm(data={
        'email': data.get('email', ''),
        'password': data.get('password', ''),
        'display_name': data.get('displayName', ''),
    })
    if not form.is_valid():
        raise ValidationError(_form_error(form))
    user = form.save()
    logger.info("Registered user %s", user.pk)
    response = _issue_token(user, 'session')
    response.status_code = status.HTTP_201_CREATED
    return response


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginThrottle])
def login(request):
    data = request_body(request)
    form = EmailAuthenticationForm(
        data={'email': data.get('email', ''), 'password': data.get('password', '')},
        request=request,
    )
    if not form.is_valid():
        logger.info("Failed login for %s", data.get('email'))
        return Response({'error': _form_error(form)}, status=status.HTTP_401_UNAUTHORIZED)
    logger.info("User %s logged in", form.user.pk)
    return _issue_token(form.user, 'session')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    if isinstance(request.auth, APIToken):
        request.auth.is_active = False
        request.auth.save(update_fields=['is_active'])
    response = Response({'message': 'Logged out'})
    response.delete_cookie(settings.AUTH_COOKIE_NAME, samesite='Lax')
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me(request):
    return Response({'user': user_summary(request.user, include_email=True)})
