"""Application tracking domain.

Public API:
- Application: Data model for a tracked job application
- ApplicationStatus / Priority: Fixed taxonomies
- ApplicationCreate / ApplicationUpdate: Validated payloads
- ApplicationRepository: Async SQLite store for the server
- ApplicationService: Owner-scoped CRUD
- ReminderService / find_due_reminders: Follow-up reminder evaluation
- AnalyticsService / compute_stats: Aggregate statistics
"""

from applytrack.tracker.analytics import AnalyticsService, compute_stats
from applytrack.tracker.models import Application, ApplicationStatus, DueReminder, Priority
from applytrack.tracker.reminders import ReminderService, find_due_reminders
from applytrack.tracker.repository import ApplicationRepository
from applytrack.tracker.schemas import ApplicationCreate, ApplicationUpdate
from applytrack.tracker.service import ApplicationService

__all__ = [
    "AnalyticsService",
    "Application",
    "ApplicationCreate",
    "ApplicationRepository",
    "ApplicationService",
    "ApplicationStatus",
    "ApplicationUpdate",
    "DueReminder",
    "Priority",
    "ReminderService",
    "compute_stats",
    "find_due_reminders",
]
