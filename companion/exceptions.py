"""Render every API error as ``{"error": "<message>"}``."""
import logging

from django.http import Http404
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler


logger = logging.getLogger(__name__)


def _first_message(detail):
    """Flatten DRF error details (str, list or dict) into a single message."""
    if isinstance(detail, dict):
        if not detail:
            return ''
        key, value = next(iter(detail.items()))
        message = _first_message(value)
        if key in ('non_field_errors', 'detail', 'error'):
            return message
        return f"{key}: {message}"
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def json_exception_handler(exc, context):
    response = exception_handler(exc, context)
    view = context.get('view')
    view_name = view.__class__.__name__ if view is not None else 'unknown'

    if response is None:
        logger.error("Unhandled error in %s", view_name, exc_info=exc)
        return Response({'error': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, APIException):
        message = _first_message(exc.detail)
    elif isinstance(exc, Http404):
        message = 'Not found'
    elif isinstance(exc, DjangoPermissionDenied):
        message = 'Not authorized'
    else:
        message = _first_message(response.data)

    if response.status_code == status.HTTP_403_FORBIDDEN:
        logger.warning("Denied in %s: %s", view_name, message)
    response.data = {'error': message}
    return response
