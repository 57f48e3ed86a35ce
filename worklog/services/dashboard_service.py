"""Dashboard summary: headline counts, hours and recent activity for the signed-in user."""
import logging
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from worklog.models.user import User, Client, Developer
from worklog.repositories.hour_log_repository import HourLogRepository
from worklog.repositories.user_repository import UserRepository
from worklog.schemas.hour_log import HourLogOut
from worklog.services.aggregation_service import AggregationService, build_criteria
from worklog.services.permission_service import PermissionService, Resource, Action
from worklog.utils.periods import month_range, month_label

logger = logging.getLogger(__name__)

RECENT_LOGS = 5
TOP_CLIENTS = 5


class DashboardService:

    @staticmethod
    def summary(db: Session, current_user: User, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Business Analysts get the number of active clients and developers;
        other roles get the distinct clients and developers in their own logs.
        """
        grant = PermissionService.authorize(current_user, Resource.dashboard, Action.read)
        scope = PermissionService.visibility_filter(current_user, Resource.hour_log)
        today = today or date.today()
        month_start, month_end = month_range(today.year, today.month)

        overall = AggregationService.summary(db, build_criteria(scope))
        month_criteria = build_criteria(scope, start_date=month_start, end_date=month_end)
        this_month = AggregationService.summary(db, month_criteria)

        if grant.unrestricted:
            users = UserRepository(db)
            total_clients = users.count_active(Client)
            total_developers = users.count_active(Developer)
        else:
            total_clients = overall["unique_clients_count"]
            total_developers = overall["unique_developers_count"]

        recent = HourLogRepository(db).recent(RECENT_LOGS, scope=scope)
        top_clients = AggregationService.client_breakdown(db, month_criteria)[:TOP_CLIENTS]

        return {
            "total_clients": total_clients,
            "total_developers": total_developers,
            "month": month_label(today),
            "total_hours_this_month": this_month["total_hours"],
            "total_hours_overall": overall["total_hours"],
            "recent_logs": [HourLogOut.model_validate(log) for log in recent],
            "top_clients_this_month": [
                {
                    "client_id": row["client_id"],
                    "client_name": row["client_name"],
                    "total_hours": row["total_hours"],
                    "total_logs": row["total_logs"],
                }
                for row in top_clients
            ],
        }
