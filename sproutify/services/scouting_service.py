import calendar
import csv
import io
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional

from fastapi import HTTPException, status

from sproutify.core.config import settings
from sproutify.core.logger import db_logger
from sproutify.models.pest import PestCatalog, PestLog
from sproutify.models.profile import Profile
from sproutify.models.tower import Tower
from sproutify.schemas.scouting import (
    EntryStatus,
    PestCount,
    ScoutingEntry,
    ScoutingEntryCreate,
    ScoutingFilters,
    ScoutingStats,
)

CSV_HEADERS = ["Date", "Tower", "Issue", "Type", "Severity", "Location", "Status", "Action Taken", "Notes"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def months_ago(now: datetime, months: int) -> datetime:
    month_index = now.month - 1 - months
    year = now.year + month_index // 12
    month = month_index % 12 + 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


# --------------------------------------
# Status and priority
# --------------------------------------
def is_follow_up_overdue(entry: ScoutingEntry, today: date = None) -> bool:
    if not entry.follow_up_needed or not entry.follow_up_date:
        return False
    today = today or utc_now().date()
    return entry.follow_up_date < today


def get_entry_status(entry: ScoutingEntry, today: date = None) -> EntryStatus:
    if entry.resolved:
        return EntryStatus(status="resolved", label="Resolved", color="bg-green-100 text-green-800")

    if entry.follow_up_needed and entry.follow_up_date:
        if is_follow_up_overdue(entry, today):
            return EntryStatus(status="overdue", label="Follow-up Overdue", color="bg-red-100 text-red-800")
        return EntryStatus(status="follow-up", label="Follow-up Needed", color="bg-yellow-100 text-yellow-800")

    return EntryStatus(status="active", label="Active", color="bg-blue-100 text-blue-800")


def calculate_entry_priority(entry: ScoutingEntry, now: datetime = None) -> int:
    """Higher is more urgent."""
    now = now or utc_now()
    overdue = is_follow_up_overdue(entry, now.date())
    priority = 0

    if overdue:
        priority += 100
    elif entry.follow_up_needed:
        priority += 50

    if entry.severity:
        priority += entry.severity * 10

    days_since_observed = (now - as_naive_utc(entry.observed_at)).days
    if days_since_observed <= 1:
        priority += 5
    elif days_since_observed <= 7:
        priority += 2

    return priority


def sort_entries_by_priority(entries: Iterable[ScoutingEntry], now: datetime = None) -> List[ScoutingEntry]:
    now = now or utc_now()
    return sorted(
        entries,
        key=lambda e: (calculate_entry_priority(e, now), as_naive_utc(e.observed_at)),
        reverse=True
    )


def suggest_follow_up_date(severity: Optional[int] = None, pest_type: Optional[str] = None, today: date = None):
    today = today or utc_now().date()
    days = {3: 2, 2: 4, 1: 7}.get(severity, 7)

    # insects multiply and diseases spread quickly
    if pest_type in ("insect", "pest"):
        days = min(days, 5)
    elif pest_type == "disease":
        days = min(days, 3)

    return today + timedelta(days=days), days


# --------------------------------------
# History filters and statistics
# --------------------------------------
def matches_search(entry: ScoutingEntry, term: str) -> bool:
    term = term.lower()
    fields = [entry.pest, entry.tower_name, entry.notes or "", entry.location_on_tower or ""]
    if any(term in f.lower() for f in fields):
        return True
    return any(term in plant.lower() for plant in entry.affected_plants or [])


def filter_entries(entries: Iterable[ScoutingEntry], filters: ScoutingFilters, now: datetime = None):
    now = now or utc_now()
    result = list(entries)

    if filters.search:
        result = [e for e in result if matches_search(e, filters.search)]

    if filters.tower_id is not None:
        result = [e for e in result if e.tower_id == filters.tower_id]

    if filters.status == "active":
        result = [e for e in result if not e.resolved and not e.follow_up_needed]
    elif filters.status == "follow-up":
        result = [e for e in result if e.follow_up_needed and not e.resolved]
    elif filters.status == "resolved":
        result = [e for e in result if e.resolved]

    if filters.severity is not None:
        result = [e for e in result if e.severity == filters.severity]

    if filters.pest_type and filters.pest_type != "all":
        result = [e for e in result if e.pest_type == filters.pest_type]

    cutoff = None
    if filters.date_range == "week":
        cutoff = now - timedelta(days=7)
    elif filters.date_range == "month":
        cutoff = months_ago(now, 1)
    elif filters.date_range == "quarter":
        cutoff = months_ago(now, 3)
    if cutoff is not None:
        result = [e for e in result if as_naive_utc(e.observed_at) >= cutoff]

    return result


def calculate_scouting_stats(entries: List[ScoutingEntry], now: datetime = None) -> ScoutingStats:
    now = now or utc_now()
    today = now.date()
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)

    resolved = [e for e in entries if e.resolved]
    overdue = [e for e in entries if is_follow_up_overdue(e, today)]
    follow_up = [
        e for e in entries
        if e.follow_up_needed and not e.resolved and not is_follow_up_overdue(e, today)
    ]
    total = len(entries)
    pest_counts = Counter(e.pest for e in entries)

    return ScoutingStats(
        total=total,
        active=total - len(resolved),
        resolved=len(resolved),
        overdue=len(overdue),
        follow_up_needed=len(follow_up),
        recent_entries=sum(1 for e in entries if as_naive_utc(e.observed_at) > week_ago),
        monthly_entries=sum(1 for e in entries if as_naive_utc(e.observed_at) > month_ago),
        average_severity=sum(e.severity or 1 for e in entries) / total if total else 0.0,
        resolution_rate=len(resolved) / total * 100 if total else 0.0,
        most_common_pests=[PestCount(pest=p, count=c) for p, c in pest_counts.most_common(5)],
    )


# --------------------------------------
# CSV export
# --------------------------------------
def csv_status(entry: ScoutingEntry) -> str:
    if entry.resolved:
        return "Resolved"
    return "Follow-up" if entry.follow_up_needed else "Active"


def export_entries_to_csv(entries: Iterable[ScoutingEntry]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    buffer.write(",".join(CSV_HEADERS) + "\n")

    for entry in entries:
        writer.writerow([
            entry.observed_at.strftime("%Y-%m-%d"),
            entry.tower_name,
            entry.pest,
            entry.pest_type or "Custom",
            entry.severity or "",
            entry.location_on_tower or "",
            csv_status(entry),
            entry.action or "",
            entry.notes or "",
        ])

    return buffer.getvalue().rstrip("\n")


# --------------------------------------
# Persistence
# --------------------------------------
def serialize_entry(log: PestLog) -> ScoutingEntry:
    """Expects ``tower`` and ``pest_catalog`` to be fetched."""
    return ScoutingEntry(
        id=log.id,
        tower_id=log.tower_id,
        tower_name=log.tower.name,
        tower_location=log.tower.location.value if log.tower.location else None,
        pest=log.pest,
        pest_catalog_id=log.pest_catalog_id,
        pest_type=log.pest_catalog.type if log.pest_catalog else None,
        severity=log.severity,
        location_on_tower=log.location_on_tower,
        affected_plants=log.affected_plants,
        notes=log.notes,
        action=log.action,
        treatment_applied=log.treatment_applied or [],
        follow_up_needed=log.follow_up_needed,
        follow_up_date=log.follow_up_date,
        resolved=log.resolved,
        resolved_at=log.resolved_at,
        observed_at=log.observed_at,
        created_at=log.created_at,
        images=log.images,
    )


class ScoutingService:

    async def build_log_data(self, data: ScoutingEntryCreate) -> dict:
        catalog_item = None
        if data.pest_catalog_id is not None:
            catalog_item = await PestCatalog.get_or_none(id=data.pest_catalog_id)
            if not catalog_item:
                raise HTTPException(status_code=404, detail="Pest catalog entry not found")

        pest_name = catalog_item.name if catalog_item else (data.custom_pest or "").strip()
        if not pest_name:
            raise HTTPException(
                status_code=400,
                detail="Pest identification required: select a pest from the catalog or enter a custom observation."
            )

        if not data.symptoms.strip():
            raise HTTPException(status_code=400, detail="Symptoms required: describe what you observed.")

        if len(data.images) > settings.MAX_SCOUTING_IMAGES:
            raise HTTPException(
                status_code=400,
                detail=f"At most {settings.MAX_SCOUTING_IMAGES} images per observation"
            )

        return {
            "pest": pest_name,
            "pest_catalog": catalog_item,
            "severity": data.severity,
            "location_on_tower": data.location_on_tower or None,
            "affected_plants": data.affected_plants or None,
            "notes": data.symptoms,
            "action": data.action or None,
            "treatment_applied": data.treatment_applied or [],
            "follow_up_needed": data.follow_up_needed,
            "follow_up_date": data.follow_up_date,
            "images": data.images or None,
            "resolved": False,
            "resolved_at": None,
        }

    async def get_tower_for_teacher(self, tower_id: int, teacher: Profile) -> Tower:
        tower = await Tower.get_or_none(id=tower_id)
        if not tower:
            raise HTTPException(status_code=404, detail="Tower not found")
        if not teacher.can_manage_tower(tower):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your tower")
        return tower

    async def get_log_for_teacher(self, entry_id: int, teacher: Profile) -> PestLog:
        log = await PestLog.get_or_none(id=entry_id).prefetch_related("tower", "pest_catalog")
        if not log:
            raise HTTPException(status_code=404, detail="Scouting entry not found")
        if not teacher.can_manage_tower(log.tower):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your tower")
        return log

    async def create_entry(self, tower_id: int, teacher: Profile, data: ScoutingEntryCreate) -> ScoutingEntry:
        tower = await self.get_tower_for_teacher(tower_id, teacher)
        log_data = await self.build_log_data(data)

        try:
            log = await PestLog.create(tower=tower, teacher=teacher, **log_data)
        except Exception as e:
            db_logger.log_error("create_scouting_entry", e)
            raise HTTPException(status_code=500, detail="Could not save the observation. Please try again.")

        db_logger.log_create("PestLog", {
            "id": log.id,
            "tower_id": tower.id,
            "pest": log.pest,
            "severity": log.severity
        })

        await log.fetch_related("tower", "pest_catalog")
        return serialize_entry(log)

    async def update_entry(self, entry_id: int, teacher: Profile, data: ScoutingEntryCreate) -> ScoutingEntry:
        log = await self.get_log_for_teacher(entry_id, teacher)
        log_data = await self.build_log_data(data)

        log.update_from_dict(log_data)
        await log.save()

        db_logger.log_update("PestLog", log.id, {
            k: v for k, v in log_data.items() if k != "pest_catalog"
        })

        await log.fetch_related("tower", "pest_catalog")
        return serialize_entry(log)

    async def toggle_resolved(self, entry_id: int, teacher: Profile) -> ScoutingEntry:
        log = await self.get_log_for_teacher(entry_id, teacher)

        log.resolved = not log.resolved
        log.resolved_at = utc_now() if log.resolved else None
        await log.save(update_fields=["resolved", "resolved_at"])

        db_logger.log_update("PestLog", log.id, {
            "resolved": log.resolved,
            "resolved_at": log.resolved_at
        })
        return serialize_entry(log)

    async def delete_entry(self, entry_id: int, teacher: Profile):
        log = await self.get_log_for_teacher(entry_id, teacher)
        await log.delete()
        db_logger.log_delete("PestLog", entry_id)

    async def list_entries(self, teacher: Profile) -> List[ScoutingEntry]:
        query = PestLog.all()
        if teacher.role == "teacher":
            query = query.filter(tower__teacher_id=teacher.id)

        logs = await query.order_by("-observed_at").prefetch_related("tower", "pest_catalog")
        db_logger.logger.debug(f"Retrieved {len(logs)} scouting entries for profile {teacher.id}")
        return [serialize_entry(log) for log in logs]
