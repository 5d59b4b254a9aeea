# app/services/quota_resolver.py
"""
Vacation quota resolver.

Cascade, first match wins:
  1. specific_date_limits[YYYY-MM-DD][team]       (an explicit 0 counts)
  2. team_monthly_weekday_limits[team][month][weekday]
  3. max_drivers_off_per_day[team]
  4. global_max_drivers_off_per_day               (DEFAULT_GLOBAL_MAX_OFF_PER_DAY without settings)

A limit of 0 forbids day-off requests outright for that (date, team).
Both the self-service path and the admin bulk path go through check_quota.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping, Optional

from app.config import settings as app_settings
from app.exceptions import QuotaExceeded, ValidationError
from app.models.enums import WorkStatus
from app.services.snapshots import VacationSettingsSnapshot
from app.utils.dates import day_key, iter_days, weekday_index
from app.utils.logger import get_logger

logger = get_logger(__name__)

RULE_SPECIFIC_DATE = "specific_date"
RULE_TEAM_MONTHLY_WEEKDAY = "team_monthly_weekday"
RULE_TEAM_DEFAULT = "team_default"
RULE_GLOBAL_DEFAULT = "global_default"


@dataclass(frozen=True)
class LimitResult:
    limit: int
    rule: str
    detail: str


def limit_rule_for(day: date, team: str,
                   vacation_settings: Optional[VacationSettingsSnapshot]) -> LimitResult:
    if vacation_settings is None:
        limit = app_settings.DEFAULT_GLOBAL_MAX_OFF_PER_DAY
        return LimitResult(limit, RULE_GLOBAL_DEFAULT, f"no settings, default {limit}")

    key = day_key(day)
    specific = vacation_settings.specific_date_limits.get(key, {}).get(team)
    if specific is not None:
        return LimitResult(specific, RULE_SPECIFIC_DATE, f"{key} override for {team}")

    weekday = weekday_index(day)
    monthly = (
        vacation_settings.team_monthly_weekday_limits
        .get(team, {})
        .get(day.month, {})
        .get(weekday)
    )
    if monthly is not None:
        return LimitResult(monthly, RULE_TEAM_MONTHLY_WEEKDAY,
                           f"{team} month {day.month} weekday {weekday}")

    team_default = vacation_settings.max_drivers_off_per_day.get(team)
    if team_default is not None:
        return LimitResult(team_default, RULE_TEAM_DEFAULT, f"{team} daily limit")

    limit = vacation_settings.global_max_drivers_off_per_day
    return LimitResult(limit, RULE_GLOBAL_DEFAULT, "global daily limit")


def limit_for(day: date, team: str, vacation_settings: Optional[VacationSettingsSnapshot]) -> int:
    return limit_rule_for(day, team, vacation_settings).limit


def limits_for_range(start: date, end: date, team: str,
                     vacation_settings: Optional[VacationSettingsSnapshot]) -> dict[date, LimitResult]:
    if start > end:
        raise ValidationError(f"Start date {start} is after end date {end}", field="start_date")
    return {day: limit_rule_for(day, team, vacation_settings) for day in iter_days(start, end)}


# ── Counting & checks ────────────────────────────────────────────────────────

def count_existing(day: date, team: str, requests: Iterable, include_external: bool = False,
                   exclude_driver_ids: Iterable[int] = ()) -> int:
    """
    Day-off records for (day, team). External drivers are not counted unless
    include_external is set; exclude_driver_ids drops drivers whose record is
    about to be rewritten.
    """
    excluded = set(exclude_driver_ids)
    return sum(
        1 for r in requests
        if r.date == day
        and r.team == team
        and r.work_status == WorkStatus.DAY_OFF
        and r.driver_id not in excluded
        and (include_external or not r.is_external_driver)
    )


def check_quota(day: date, team: str, requests: Iterable,
                vacation_settings: Optional[VacationSettingsSnapshot], requested: int = 1,
                requester_is_external: bool = False, include_external: bool = False,
                exclude_driver_ids: Iterable[int] = ()) -> LimitResult:
    """
    Raise QuotaExceeded if `requested` more day-offs would exceed the limit.
    A zero limit rejects before counting. External requesters skip the count
    comparison but not the zero prohibition.
    """
    result = limit_rule_for(day, team, vacation_settings)
    if result.limit == 0:
        logger.warning(f"[VACATION] Day-off forbidden for {team} on {day} ({result.rule})")
        raise QuotaExceeded(day, team, limit=0, requested=requested)

    if requester_is_external:
        return result

    existing = count_existing(day, team, requests, include_external, exclude_driver_ids)
    if existing + requested > result.limit:
        logger.warning(
            f"[VACATION] Quota exceeded for {team} on {day}: "
            f"{existing} + {requested} > {result.limit} ({result.rule})"
        )
        raise QuotaExceeded(day, team, limit=result.limit, existing=existing, requested=requested)
    return result


def check_batch(day: date, requested_by_team: Mapping[str, int], requests: Iterable,
                vacation_settings: Optional[VacationSettingsSnapshot],
                exclude_driver_ids: Iterable[int] = ()) -> dict[str, LimitResult]:
    """
    Dry run for admin bulk actions: every team must pass before anything is
    written. Returns the per-team limits, raises on the first failing team.
    """
    requests = list(requests)
    excluded = list(exclude_driver_ids)
    results = {}
    for team in sorted(requested_by_team):
        count = requested_by_team[team]
        if count <= 0:
            continue
        results[team] = check_quota(day, team, requests, vacation_settings, requested=count,
                                    exclude_driver_ids=excluded)
    return results


# ── Settings validation ──────────────────────────────────────────────────────

def validate_settings(vacation_settings: VacationSettingsSnapshot) -> tuple[list[str], list[str]]:
    """Return (errors, warnings) for a candidate settings object."""
    errors: list[str] = []
    warnings: list[str] = []

    if vacation_settings.global_max_drivers_off_per_day < 0:
        errors.append("global_max_drivers_off_per_day must not be negative")
    elif vacation_settings.global_max_drivers_off_per_day == 0:
        warnings.append("global_max_drivers_off_per_day is 0: teams without a rule cannot take days off")

    if vacation_settings.minimum_off_days_per_month < 0:
        errors.append("minimum_off_days_per_month must not be negative")
    if vacation_settings.maximum_off_days_per_month < vacation_settings.minimum_off_days_per_month:
        errors.append("maximum_off_days_per_month is below minimum_off_days_per_month")
    if not 1 <= vacation_settings.notification_day <= 31:
        errors.append("notification_day must be between 1 and 31")

    for team, limit in vacation_settings.max_drivers_off_per_day.items():
        if limit < 0:
            errors.append(f"max_drivers_off_per_day[{team}] must not be negative")

    for team, months in vacation_settings.team_monthly_weekday_limits.items():
        for month, weekdays in months.items():
            if not isinstance(month, int) or not 1 <= month <= 12:
                errors.append(f"team_monthly_weekday_limits[{team}]: month {month} outside 1..12")
                continue
            for weekday, limit in weekdays.items():
                if not isinstance(weekday, int) or not 0 <= weekday <= 6:
                    errors.append(
                        f"team_monthly_weekday_limits[{team}][{month}]: weekday {weekday} outside 0..6"
                    )
                elif limit < 0:
                    errors.append(f"team_monthly_weekday_limits[{team}][{month}][{weekday}] is negative")

    for key, teams in vacation_settings.specific_date_limits.items():
        try:
            date.fromisoformat(key)
        except ValueError:
            errors.append(f"specific_date_limits: {key!r} is not a YYYY-MM-DD date")
            continue
        for team, limit in teams.items():
            if limit < 0:
                errors.append(f"specific_date_limits[{key}][{team}] is negative")

    return errors, warnings
