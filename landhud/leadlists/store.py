"""
Durable record store for lead lists.

Thin functions over the ``LeadList`` model. Every write is a single-row
statement keyed by id, so concurrent writers never need a process lock.
"""
from __future__ import annotations

import uuid

from django.db.models import Q
from django.utils import timezone

from landhud.leadlists.models import LeadList
from landhud.leadlists.statuses import parse_list_status, to_stored


def _as_uuid(value):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def create(**fields) -> LeadList:
    return LeadList.objects.create(**fields)


def get(list_id) -> LeadList | None:
    pk = _as_uuid(list_id)
    if pk is None:
        return None
    return LeadList.objects.filter(id=pk).first()


def list_records(*, status=None, county=None, state=None, q=None, limit=None) -> list[LeadList]:
    """
    status is the API-facing vocabulary. Newest first.
    """
    qs = LeadList.objects.all().order_by("-received_at")

    if status:
        listed = parse_list_status(status)
        if listed is None:
            return []
        qs = qs.filter(status=to_stored(listed))
    if county:
        qs = qs.filter(county__iexact=county)
    if state:
        qs = qs.filter(state__iexact=state)
    if q:
        qs = qs.filter(
            Q(name__icontains=q) |
            Q(file_name__icontains=q) |
            Q(original_file_name__icontains=q)
        )
    if limit:
        qs = qs[:limit]
    return list(qs)


def update(list_id, fields: dict, *, expected_statuses=None) -> LeadList | None:
    """
    Partial single-row update. ``updated_at`` always advances.

    With ``expected_statuses`` (stored vocabulary) the row is only touched if
    its current status is one of them. Returns the fresh record, or None when
    no row matched.
    """
    pk = _as_uuid(list_id)
    if pk is None:
        return None

    qs = LeadList.objects.filter(id=pk)
    if expected_statuses is not None:
        qs = qs.filter(status__in=list(expected_statuses))

    changes = dict(fields)
    changes["updated_at"] = timezone.now()
    if not qs.update(**changes):
        return None
    return LeadList.objects.get(id=pk)


def delete(list_id) -> bool:
    pk = _as_uuid(list_id)
    if pk is None:
        return False
    deleted, _ = LeadList.objects.filter(id=pk).delete()
    return deleted > 0


def existing_ids(list_ids) -> set[str]:
    pks = [pk for pk in (_as_uuid(x) for x in list_ids) if pk is not None]
    if not pks:
        return set()
    return {str(pk) for pk in LeadList.objects.filter(id__in=pks).values_list("id", flat=True)}
