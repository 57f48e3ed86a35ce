"""
Aggregation Service Module.

Grouped views over hour log facts: per client, developer, project, task and
day, plus overall and current-month summaries. All grouping happens in SQL;
every entry point applies the actor's hour-log visibility first, so a
developer only ever aggregates their own hours and a client only its own.
"""
import logging
from collections import defaultdict
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, aliased

from worklog.core.errors import bad_request
from worklog.models.hour_log import HourLog
from worklog.models.project import Project
from worklog.models.task import Task
from worklog.models.user import User, Client, Developer
from worklog.repositories.hour_log_repository import HourLogRepository
from worklog.repositories.project_repository import ProjectRepository
from worklog.schemas.hour_log import HourLogOut
from worklog.services.permission_service import PermissionService, Resource, Action
from worklog.utils.periods import period_range, bucket_label, month_range, month_label

logger = logging.getLogger(__name__)

REPORT_TYPES = ("clients", "developers", "current-month", "daily")


def build_criteria(
    scope: Any = None,
    client_id: Optional[int] = None,
    developer_id: Optional[int] = None,
    project_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Any]:
    """Filter predicates over HourLog; absent filters add nothing."""
    criteria = []
    if scope is not None:
        criteria.append(scope)
    if client_id is not None:
        criteria.append(HourLog.client_id == client_id)
    if developer_id is not None:
        criteria.append(HourLog.developer_id == developer_id)
    if project_id is not None:
        criteria.append(HourLog.project_id == project_id)
    if start_date is not None:
        criteria.append(HourLog.date >= start_date)
    if end_date is not None:
        criteria.append(HourLog.date <= end_date)
    return criteria


def _avg(value) -> float:
    return round(float(value or 0), 2)


class AggregationService:
    """Grouped sums and summaries over hour logs."""

    # ========================================
    # BUILDING BLOCKS (criteria already scoped)
    # ========================================

    @staticmethod
    def summary(db: Session, criteria: List[Any]) -> Dict[str, Any]:
        row = (
            db.query(
                func.coalesce(func.sum(HourLog.hours), 0),
                func.count(HourLog.id),
                func.avg(HourLog.hours),
                func.count(func.distinct(HourLog.client_id)),
                func.count(func.distinct(HourLog.developer_id)),
                func.min(HourLog.date),
                func.max(HourLog.date),
            )
            .filter(*criteria)
            .one()
        )
        total_hours, total_logs, avg_hours, clients, developers, first, last = row
        return {
            "total_hours": float(total_hours),
            "total_logs": total_logs,
            "avg_hours_per_log": _avg(avg_hours),
            "unique_clients_count": clients,
            "unique_developers_count": developers,
            "date_range": {"start": first, "end": last} if total_logs else None,
        }

    @staticmethod
    def client_breakdown(db: Session, criteria: List[Any]) -> List[Dict[str, Any]]:
        """Per-client totals, most hours first."""
        total = func.sum(HourLog.hours).label("total_hours")
        rows = (
            db.query(
                HourLog.client_id,
                Client.name,
                Client.email,
                total,
                func.count(HourLog.id),
                func.avg(HourLog.hours),
            )
            .join(Client, Client.id == HourLog.client_id)
            .filter(*criteria)
            .group_by(HourLog.client_id, Client.name, Client.email)
            .order_by(total.desc(), HourLog.client_id)
            .all()
        )
        return [
            {
                "client_id": client_id,
                "client_name": name,
                "client_email": email,
                "total_hours": float(hours),
                "total_logs": logs,
                "avg_hours_per_log": _avg(avg),
            }
            for client_id, name, email, hours, logs, avg in rows
        ]

    @staticmethod
    def developer_breakdown(db: Session, criteria: List[Any]) -> List[Dict[str, Any]]:
        """Per-developer totals and earnings, most hours first."""
        total = func.sum(HourLog.hours).label("total_hours")
        rows = (
            db.query(
                HourLog.developer_id,
                Developer.name,
                Developer.email,
                Developer.hourly_rate,
                total,
                func.count(HourLog.id),
                func.avg(HourLog.hours),
            )
            .join(Developer, Developer.id == HourLog.developer_id)
            .filter(*criteria)
            .group_by(
                HourLog.developer_id, Developer.name, Developer.email, Developer.hourly_rate
            )
            .order_by(total.desc(), HourLog.developer_id)
            .all()
        )
        result = []
        for developer_id, name, email, rate, hours, logs, avg in rows:
            hours = float(hours)
            result.append(
                {
                    "developer_id": developer_id,
                    "developer_name": name,
                    "developer_email": email,
                    "hourly_rate": rate,
                    "total_hours": hours,
                    "total_logs": logs,
                    "avg_hours_per_log": _avg(avg),
                    # Sum first, multiply once
                    "total_earnings": round(rate * hours, 2),
                }
            )
        return result

    @staticmethod
    def project_breakdown(db: Session, criteria: List[Any]) -> List[Dict[str, Any]]:
        total = func.sum(HourLog.hours).label("total_hours")
        rows = (
            db.query(
                HourLog.project_id,
                Project.name,
                Project.client_id,
                total,
                func.count(HourLog.id),
                func.count(func.distinct(HourLog.developer_id)),
                func.min(HourLog.date),
                func.max(HourLog.date),
            )
            .join(Project, Project.id == HourLog.project_id)
            .filter(*criteria)
            .group_by(HourLog.project_id, Project.name, Project.client_id)
            .order_by(total.desc(), HourLog.project_id)
            .all()
        )
        return [
            {
                "project_id": project_id,
                "project_name": name,
                "client_id": client_id,
                "total_hours": float(hours),
                "total_logs": logs,
                "unique_developers_count": developers,
                "first_date": first,
                "last_date": last,
            }
            for project_id, name, client_id, hours, logs, developers, first, last in rows
        ]

    @staticmethod
    def task_breakdown(db: Session, criteria: List[Any]) -> List[Dict[str, Any]]:
        total = func.sum(HourLog.hours).label("total_hours")
        rows = (
            db.query(
                HourLog.task_id,
                Task.title,
                Task.project_id,
                total,
                func.count(HourLog.id),
                func.count(func.distinct(HourLog.developer_id)),
                func.min(HourLog.date),
                func.max(HourLog.date),
            )
            .join(Task, Task.id == HourLog.task_id)
            .filter(*criteria)
            .group_by(HourLog.task_id, Task.title, Task.project_id)
            .order_by(total.desc(), HourLog.task_id)
            .all()
        )
        return [
            {
                "task_id": task_id,
                "task_title": title,
                "project_id": project_id,
                "total_hours": float(hours),
                "total_logs": logs,
                "unique_developers_count": developers,
                "first_date": first,
                "last_date": last,
            }
            for task_id, title, project_id, hours, logs, developers, first, last in rows
        ]

    @staticmethod
    def daily_breakdown(db: Session, criteria: List[Any]) -> List[Dict[str, Any]]:
        """Per-day totals, oldest day first."""
        rows = (
            db.query(
                HourLog.date,
                func.sum(HourLog.hours),
                func.count(HourLog.id),
                func.count(func.distinct(HourLog.client_id)),
                func.count(func.distinct(HourLog.developer_id)),
            )
            .filter(*criteria)
            .group_by(HourLog.date)
            .order_by(HourLog.date)
            .all()
        )
        return [
            {
                "date": day.isoformat(),
                "total_hours": float(hours),
                "total_logs": logs,
                "unique_clients_count": clients,
                "unique_developers_count": developers,
            }
            for day, hours, logs, clients, developers in rows
        ]

    @staticmethod
    def current_month(
        db: Session, criteria: List[Any], today: Optional[date] = None
    ) -> Dict[str, Any]:
        today = today or date.today()
        start, end = month_range(today.year, today.month)
        result = AggregationService.summary(
            db, criteria + [HourLog.date >= start, HourLog.date <= end]
        )
        result["month"] = month_label(today)
        return result

    # ========================================
    # ACTOR-FACING OPERATIONS
    # ========================================

    @staticmethod
    def scoped_criteria(
        db: Session,
        current_user: User,
        client_id: Optional[int] = None,
        developer_id: Optional[int] = None,
        project_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Any]:
        """Authorize an aggregate read and return the actor-scoped criteria."""
        grant = PermissionService.authorize(current_user, Resource.hour_log, Action.stats)
        PermissionService.check_filters(current_user, client_id=client_id, developer_id=developer_id)
        return build_criteria(
            grant.scope, client_id, developer_id, project_id, start_date, end_date
        )

    @staticmethod
    def hours_report(
        db: Session,
        current_user: User,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        client_id: Optional[int] = None,
        developer_id: Optional[int] = None,
        report_type: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Composite hours report, or one section of it.

        Args:
            report_type: clients, developers, current-month or daily; None
                returns every section

        Returns:
            Dictionary of report sections
        """
        if report_type is not None and report_type not in REPORT_TYPES:
            raise bad_request(f"Invalid report type. Use one of: {', '.join(REPORT_TYPES)}")

        criteria = AggregationService.scoped_criteria(
            db, current_user, client_id, developer_id, None, start_date, end_date
        )
        sections = {
            "clients": lambda: AggregationService.client_breakdown(db, criteria),
            "developers": lambda: AggregationService.developer_breakdown(db, criteria),
            "current-month": lambda: AggregationService.current_month(db, criteria, today),
            "daily": lambda: AggregationService.daily_breakdown(db, criteria),
        }
        if report_type is not None:
            return {"report_type": report_type, "data": sections[report_type]()}

        return {
            "summary": AggregationService.summary(db, criteria),
            "current_month": sections["current-month"](),
            "client_breakdown": sections["clients"](),
            "developer_breakdown": sections["developers"](),
            "daily_breakdown": sections["daily"](),
        }

    @staticmethod
    def client_hours(
        db: Session,
        current_user: User,
        period: Optional[str] = "monthly",
        client_id: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Hours per client over a period preset, split into calendar buckets.

        With a client selected, also lists that client's visible projects
        with their estimated, accumulated and logged hours.
        """
        start, end = period_range(period, today=today)
        criteria = AggregationService.scoped_criteria(
            db, current_user, client_id=client_id, start_date=start, end_date=end
        )
        # Both subtypes share the users table, so each needs its own alias
        client, developer = aliased(Client, flat=True), aliased(Developer, flat=True)
        rows = (
            db.query(
                HourLog.client_id,
                client.name,
                client.email,
                HourLog.date,
                developer.name,
                func.sum(HourLog.hours),
            )
            .join(client, client.id == HourLog.client_id)
            .join(developer, developer.id == HourLog.developer_id)
            .filter(*criteria)
            .group_by(HourLog.client_id, client.name, client.email, HourLog.date, developer.name)
            .all()
        )

        clients: Dict[int, Dict[str, Any]] = {}
        for cid, name, email, day, developer_name, hours in rows:
            entry = clients.setdefault(
                cid,
                {
                    "client_id": cid,
                    "client_name": name,
                    "client_email": email,
                    "total_hours": 0.0,
                    "buckets": defaultdict(float),
                    "developers": set(),
                },
            )
            entry["total_hours"] += float(hours)
            entry["buckets"][bucket_label(day, period)] += float(hours)
            entry["developers"].add(developer_name)

        result = []
        for entry in sorted(clients.values(), key=lambda e: (-e["total_hours"], e["client_id"])):
            entry["buckets"] = dict(entry["buckets"])
            entry["developers"] = sorted(entry["developers"])
            result.append(entry)

        projects = []
        if client_id is not None:
            project_scope = PermissionService.visibility_filter(current_user, Resource.project)
            client_projects, _ = ProjectRepository(db).list_projects(
                1, 1000, scope=project_scope, client_id=client_id
            )
            totals = ProjectRepository(db).hour_log_totals([p.id for p in client_projects])
            for project in client_projects:
                logged, count = totals.get(project.id, (0.0, 0))
                projects.append(
                    {
                        "project_id": project.id,
                        "project_name": project.name,
                        "estimated_hours": project.estimated_hours,
                        "actual_hours": project.actual_hours,
                        "logged_hours": logged,
                        "hour_logs_count": count,
                    }
                )

        return {
            "period": period,
            "date_range": {"start": start, "end": end},
            "clients": result,
            "projects": projects,
        }

    @staticmethod
    def developer_hours(
        db: Session,
        current_user: User,
        period: Optional[str] = "monthly",
        developer_id: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """Hours per developer over a period preset, split into calendar buckets."""
        start, end = period_range(period, today=today)
        criteria = AggregationService.scoped_criteria(
            db, current_user, developer_id=developer_id, start_date=start, end_date=end
        )
        client, developer = aliased(Client, flat=True), aliased(Developer, flat=True)
        rows = (
            db.query(
                HourLog.developer_id,
                developer.name,
                developer.email,
                developer.developer_role,
                HourLog.date,
                client.name,
                func.sum(HourLog.hours),
            )
            .join(developer, developer.id == HourLog.developer_id)
            .join(client, client.id == HourLog.client_id)
            .filter(*criteria)
            .group_by(
                HourLog.developer_id,
                developer.name,
                developer.email,
                developer.developer_role,
                HourLog.date,
                client.name,
            )
            .all()
        )

        developers: Dict[int, Dict[str, Any]] = {}
        for did, name, email, role, day, client_name, hours in rows:
            entry = developers.setdefault(
                did,
                {
                    "developer_id": did,
                    "developer_name": name,
                    "developer_email": email,
                    "developer_role": role,
                    "total_hours": 0.0,
                    "buckets": defaultdict(float),
                    "clients": set(),
                },
            )
            entry["total_hours"] += float(hours)
            entry["buckets"][bucket_label(day, period)] += float(hours)
            entry["clients"].add(client_name)

        result = []
        for entry in sorted(developers.values(), key=lambda e: (-e["total_hours"], e["developer_id"])):
            entry["buckets"] = dict(entry["buckets"])
            entry["clients"] = sorted(entry["clients"])
            result.append(entry)

        return {"period": period, "date_range": {"start": start, "end": end}, "developers": result}

    @staticmethod
    def hours_summary(
        db: Session,
        current_user: User,
        period: Optional[str] = "monthly",
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """Totals, client and developer breakdowns and the ten latest logs for a period."""
        start, end = period_range(period, start_date, end_date, today=today)
        criteria = AggregationService.scoped_criteria(
            db, current_user, start_date=start, end_date=end
        )
        grant_scope = PermissionService.visibility_filter(current_user, Resource.hour_log)
        recent = HourLogRepository(db).recent(
            10, scope=grant_scope, start_date=start, end_date=end
        )
        return {
            "period": period,
            "date_range": {"start": start, "end": end},
            "summary": AggregationService.summary(db, criteria),
            "client_breakdown": AggregationService.client_breakdown(db, criteria),
            "developer_breakdown": AggregationService.developer_breakdown(db, criteria),
            "recent_logs": [HourLogOut.model_validate(log) for log in recent],
        }
