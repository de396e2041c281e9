# botilyx/services/push_service.py
import json
import logging

from pywebpush import webpush, WebPushException

logger = logging.getLogger(__name__)

GONE_STATUS_CODES = (404, 410)


class PushNotConfigured(Exception):
    pass


def send_push(subscription_info, payload, vapid_private_key, vapid_claim_email):
    """
    Deliver one payload to one browser subscription.

    Returns True on success. Returns False for an expired subscription
    (404/410) so the caller can drop it; other failures raise.
    """
    if not vapid_private_key:
        raise PushNotConfigured("VAPID keys are not configured")

    try:
        webpush(
            subscription_info=subscription_info,
            data=json.dumps(payload),
            vapid_private_key=vapid_private_key,
            vapid_claims={"sub": vapid_claim_email},
        )
    except WebPushException as e:
        status = e.response.status_code if e.response is not None else None
        if status in GONE_STATUS_CODES:
            logger.info("Push subscription gone (%s): %s", status, subscription_info.get("endpoint"))
            return False
        raise
    return True
