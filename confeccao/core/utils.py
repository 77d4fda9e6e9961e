"""Audit trail helpers"""
import logging

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    if request is None or not hasattr(request, 'META'):
        return None
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return request.META.get('REMOTE_ADDR') or None


def acting_user(request=None, user=None):
    """Explicit user first, then the authenticated user of the request; None for anonymous"""
    candidate = user or getattr(request, 'user', None)
    if candidate is not None and candidate.is_authenticated:
        return candidate
    return None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Record one audit entry.

    ``action`` is one of AuditLog.ACTION_CHOICES (stock_add, stock_cut,
    order_distribute, ...). ``object_reference`` groups every event of one
    production order ('#12'). Never raises: a failed audit write is logged
    and the operation that triggered it still succeeds.
    """
    if not action or not model_name or object_id in (None, ''):
        logger.warning(f"Audit log skipped: action={action}, model_name={model_name}, object_id={object_id}")
        return None
    try:
        return AuditLog.objects.create(
            user=acting_user(request, user),
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=get_client_ip(request)
        )
    except Exception as e:
        logger.error(f"Failed to create audit log for {model_name} {object_id}: {str(e)}")
        return None
