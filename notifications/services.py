import logging

from kombu.exceptions import OperationalError

from .tasks import deliver_notification


logger = logging.getLogger(__name__)


def notify(user_id, title, message, kind='system', related_id=''):
    """Queue an in-app notification; runs inline when no broker is configured.

    Notifications are best effort: an unreachable broker is logged and the
    caller's already committed change stands.
    """
    logger.debug("Queueing notification '%s' for user %s", title, user_id)
    try:
        deliver_notification.delay(user_id, title, message, kind, str(related_id or ''))
    except OperationalError:
        logger.exception("Could not queue notification '%s' for user %s", title, user_id)
