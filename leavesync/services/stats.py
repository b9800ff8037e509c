"""
Dashboard statistics.

Everything is recomputed per call from the request tables, scoped to what
the caller is allowed to see.
"""
from typing import Dict, List, Sequence

from sqlalchemy import extract, func
from sqlalchemy.orm import Session

from . import policy
from .kinds import RequestKind


MONTHLY_BUCKETS = 12


def _number(value):
    if value is None:
        return 0
    as_float = float(value)
    return int(as_float) if as_float.is_integer() else as_float


def group_by(
    db: Session,
    model,
    keys: Sequence,
    criteria: Sequence = (),
    sums: Dict[str, str] = None,
    newest_first: bool = False,
    limit: int = None,
) -> List[dict]:
    """
    Count rows (and optionally sum columns) per distinct key.

    Args:
        model: Mapped class to aggregate
        keys: Labelled column expressions to group on
        criteria: Filter criteria (e.g. from ``policy.visibility_filter``)
        sums: Output name -> column name on ``model`` to sum
        newest_first: Order groups by key descending instead of ascending
        limit: Maximum number of groups

    Returns:
        One dict per group: ``{"_id": key, "count": n, <sum name>: total}``.
        With a single key ``_id`` is the bare value, otherwise a dict of the
        key labels.
    """
    sums = sums or {}
    sum_columns = [
        func.coalesce(func.sum(getattr(model, column)), 0).label(name)
        for name, column in sums.items()
    ]
    query = (
        db.query(*keys, func.count(model.id).label("count"), *sum_columns)
        .filter(*criteria)
        .group_by(*keys)
        .order_by(*[k.desc() if newest_first else k.asc() for k in keys])
    )
    if limit:
        query = query.limit(limit)

    results = []
    for row in query.all():
        mapping = row._mapping
        if len(keys) == 1:
            group_id = mapping[keys[0].name]
        else:
            group_id = {k.name: mapping[k.name] for k in keys}
        entry = {"_id": group_id, "count": mapping["count"]}
        for name in sums:
            entry[name] = _number(mapping[name])
        results.append(entry)
    return results


def request_stats(db: Session, kind: RequestKind, actor) -> dict:
    model = kind.model
    criteria = policy.visibility_filter(actor, model)

    by_status = group_by(db, model, [model.status.label("status")], criteria, kind.status_sums)
    by_type = group_by(db, model, [kind.type_column.label(kind.type_field)], criteria, kind.type_sums)

    year = extract("year", model.created_at).label("year")
    month = extract("month", model.created_at).label("month")
    # Most recent buckets, returned oldest first
    monthly = group_by(
        db, model, [year, month], criteria, kind.monthly_sums,
        newest_first=True, limit=MONTHLY_BUCKETS,
    )
    monthly.reverse()
    for bucket in monthly:
        bucket["_id"] = {"year": int(bucket["_id"]["year"]), "month": int(bucket["_id"]["month"])}

    return {"byStatus": by_status, kind.type_stats_key: by_type, "monthly": monthly}
