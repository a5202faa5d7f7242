from rest_framework.decorators import api_view
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from companion.utils import request_body

from .models import Notification


@api_view(['GET', 'PATCH'])
def notification_list(request):
    if request.method == 'GET':
        notifications = Notification.objects.filter(user=request.user)[:50]
        return Response({'notifications': [
            {
                'id': n.id,
                'title': n.title,
                'message': n.message,
                'type': n.kind,
                'read': n.read,
                'time': n.created_at,
                'relatedId': n.related_id or None,
            }
            for n in notifications
        ]})

    data = request_body(request)
    notification_id = data.get('notificationId')
    if data.get('markAllRead'):
        Notification.objects.filter(user=request.user, read=False).update(read=True)
    elif notification_id:
        try:
            notification_id = int(notification_id)
        except (TypeError, ValueError):
            raise ValidationError('Invalid notification ID')
        Notification.objects.filter(pk=notification_id, user=request.user).update(read=True)
    else:
        raise ValidationError('Invalid request')
    return Response({'success': True})
