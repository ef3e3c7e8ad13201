"""
Read-time merge of the durable store and the legacy in-memory cache.

Nothing here writes to either source, so the list endpoint can call it on
every refresh.
"""
from __future__ import annotations

from datetime import datetime, timezone as dt_timezone

from django.utils.dateparse import parse_datetime

from landhud.leadlists import store
from landhud.leadlists.legacy_cache import legacy_cache
from landhud.leadlists.serializers import LeadListSerializer
from landhud.leadlists.statuses import parse_list_status

_OLDEST = datetime.min.replace(tzinfo=dt_timezone.utc)


def _received_at(entry: dict) -> datetime:
    raw = entry.get("receivedAt")
    if isinstance(raw, datetime):
        value = raw
    else:
        try:
            value = parse_datetime(str(raw or ""))
        except ValueError:
            value = None
    if value is None:
        return _OLDEST
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt_timezone.utc)
    return value


def merge(durable: list[dict], cached: list[dict]) -> list[dict]:
    """
    Durable entries win on id collisions; cache-only entries are appended.
    Result is newest first by receivedAt.
    """
    seen = {str(item.get("id")) for item in durable}
    merged = list(durable)
    for item in cached:
        key = str(item.get("id"))
        if key in seen:
            continue
        seen.add(key)
        merged.append(item)
    return sorted(merged, key=_received_at, reverse=True)


def _matches(entry: dict, *, status=None, county=None, state=None, q=None) -> bool:
    if status and entry.get("status") != getattr(parse_list_status(status), "value", None):
        return False
    if county and (entry.get("county") or "").lower() != county.lower():
        return False
    if state and (entry.get("state") or "").lower() != state.lower():
        return False
    if q:
        needle = q.lower()
        haystack = " ".join(str(entry.get(k) or "") for k in ("name", "fileName", "originalFileName")).lower()
        if needle not in haystack:
            return False
    return True


def reconciled_lists(*, status=None, county=None, state=None, q=None, limit=None) -> list[dict]:
    durable = LeadListSerializer(
        store.list_records(status=status, county=county, state=state, q=q, limit=limit),
        many=True,
    ).data
    cached = [
        entry for entry in legacy_cache.snapshot()
        if _matches(entry, status=status, county=county, state=state, q=q)
    ]
    # a durable row shadows its cache copy even when the row itself was
    # filtered out or cut by the limit
    shadowed = store.existing_ids([entry.get("id") for entry in cached])
    cached = [entry for entry in cached if str(entry.get("id")) not in shadowed]

    merged = merge([dict(x) for x in durable], cached)
    if limit:
        merged = merged[:limit]
    return merged
