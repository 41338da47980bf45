"""
Audit trail for administrative changes.

Every write made through the admin API records who changed what, from
where, and the before/after values. Values are normalized to JSON types
and sensitive keys are redacted before they are stored.
"""
from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Any, Dict, List, Mapping, Optional

from django.core.serializers.json import DjangoJSONEncoder
from django.db.models import Count
from django.db.models.functions import TruncDate
from django.forms.models import model_to_dict
from django.utils import timezone
from django.utils.dateparse import parse_date

from audit.models import AuditLog

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = ("password", "token", "secret", "api_key", "private_key")
REDACTED = "[REDACTED]"


def _is_sensitive(key) -> bool:
    lowered = str(key).lower()
    return any(s in lowered for s in SENSITIVE_KEYS)


def sanitize(values: Any) -> Any:
    """Redact sensitive keys, recursing into nested objects and lists."""
    if isinstance(values, Mapping):
        return {k: REDACTED if _is_sensitive(k) else sanitize(v) for k, v in values.items()}
    if isinstance(values, (list, tuple)):
        return [sanitize(v) for v in values]
    return values


def to_values(instance) -> Dict[str, Any]:
    """JSON-normalized field values of a model instance."""
    data = model_to_dict(instance)
    data["id"] = instance.pk
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


def changed_fields(old: Mapping, new: Mapping) -> List[str]:
    return [key for key, value in new.items() if old.get(key) != value]


def _request_meta(request):
    if request is None:
        return None, None, None
    user = getattr(request, "user", None)
    if user is not None and not user.is_authenticated:
        user = None
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    ip = forwarded.split(",")[0].strip() or request.META.get("REMOTE_ADDR") or None
    return user, ip, request.META.get("HTTP_USER_AGENT")


def log(
    event: str,
    auditable=None,
    old_values: Optional[Mapping] = None,
    new_values: Optional[Mapping] = None,
    metadata: Optional[Mapping] = None,
    request=None,
) -> AuditLog:
    user, ip, user_agent = _request_meta(request)
    entry = AuditLog.objects.create(
        event=event,
        auditable_type=auditable._meta.label if auditable is not None else None,
        auditable_id=auditable.pk if auditable is not None else None,
        user=user,
        ip_address=ip,
        user_agent=user_agent,
        old_values=sanitize(dict(old_values or {})),
        new_values=sanitize(dict(new_values or {})),
        metadata=dict(metadata or {}),
    )
    logger.info("Audit %s by %s", event, getattr(user, "username", "system"))
    return entry


def _event_name(instance, action: str, event: Optional[str]) -> str:
    return event or f"{instance._meta.model_name}.{action}"


def log_created(instance, event: Optional[str] = None, request=None) -> AuditLog:
    return log(_event_name(instance, "created", event), instance, {}, to_values(instance), request=request)


def log_updated(instance, old_values: Mapping, event: Optional[str] = None, request=None) -> AuditLog:
    new_values = to_values(instance)
    return log(
        _event_name(instance, "updated", event),
        instance,
        old_values,
        new_values,
        {"changed_fields": changed_fields(old_values, new_values)},
        request=request,
    )


def log_deleted(instance, event: Optional[str] = None, request=None) -> AuditLog:
    """Call before the row is deleted, inside the same transaction."""
    return log(_event_name(instance, "deleted", event), instance, to_values(instance), {}, request=request)


def log_config_change(config_type: str, old_config: Mapping, new_config: Mapping, request=None) -> AuditLog:
    return log(
        f"config.{config_type}.updated",
        None,
        old_config,
        new_config,
        {"config_type": config_type, "changed_fields": changed_fields(old_config, new_config)},
        request=request,
    )


def get_logs(filters: Optional[Mapping] = None):
    """
    Audit entries, newest first, narrowed by the given filters.

    Args:
        filters: any of ``event``, ``user_id``, ``start_date`` + ``end_date``
            (ISO dates, inclusive), ``recent_days``, ``auditable_type``

    Returns:
        QuerySet[AuditLog]
    """
    filters = filters or {}
    qs = AuditLog.objects.select_related("user").order_by("-created_at", "-id")

    if filters.get("event"):
        qs = qs.filter(event=filters["event"])
    if filters.get("user_id"):
        qs = qs.filter(user_id=filters["user_id"])
    start = parse_date(str(filters.get("start_date") or ""))
    end = parse_date(str(filters.get("end_date") or ""))
    if start and end:
        qs = qs.filter(created_at__date__gte=start, created_at__date__lte=end)
    if filters.get("recent_days"):
        qs = qs.filter(created_at__gte=timezone.now() - timedelta(days=int(filters["recent_days"])))
    if filters.get("auditable_type"):
        qs = qs.filter(auditable_type=filters["auditable_type"])
    return qs


def get_stats(days: int = 30) -> Dict[str, Any]:
    qs = AuditLog.objects.filter(created_at__gte=timezone.now() - timedelta(days=days)).order_by()

    events = qs.values("event").annotate(count=Count("id"))
    users = qs.values("user_id").annotate(count=Count("id"))
    daily = qs.annotate(day=TruncDate("created_at")).values("day").annotate(count=Count("id"))

    return {
        "total_changes": qs.count(),
        "unique_users": qs.exclude(user__isnull=True).values("user_id").distinct().count(),
        "events_breakdown": {row["event"]: row["count"] for row in events},
        "users_breakdown": {str(row["user_id"]): row["count"] for row in users},
        "daily_activity": {row["day"].isoformat(): row["count"] for row in daily},
    }


def event_types() -> List[str]:
    return list(AuditLog.objects.order_by("event").values_list("event", flat=True).distinct())


def purge_old_logs(days: int = 90) -> int:
    cutoff = timezone.now() - timedelta(days=days)
    deleted, _ = AuditLog.objects.filter(created_at__lt=cutoff).delete()
    logger.info("Purged %d audit log(s) older than %d days", deleted, days)
    return deleted
