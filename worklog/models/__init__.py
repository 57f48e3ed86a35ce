from .user import User, UserRole, BusinessAnalyst, Client, Developer, AccountStatus, BillingType
from .project import Project, ProjectStatus, project_developers
from .task import Task, TaskStatus, TaskPriority, task_assignees
from .hour_log import HourLog
