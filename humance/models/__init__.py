# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    user, department, review_template, performance_review,
    kpi, bonus_parameters, diary_entry, audit_log, notification, training
)

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .department import Department
from .review_template import ReviewTemplate, TemplateAssignment
from .performance_review import PerformanceReview, ReviewStatus, WeeklyObservation
from .kpi import KpiModel, KpiAssessment
from .bonus_parameters import ConfigDocument
from .diary_entry import DiaryEntry
from .audit_log import AuditLog
from .notification import Notification, NotificationType
from .training import QuizStatus, Training, TrainingPlaylist, UserTraining

__all__ = [
    "User",
    "UserRole",
    "Department",
    "ReviewTemplate",
    "TemplateAssignment",
    "PerformanceReview",
    "ReviewStatus",
    "WeeklyObservation",
    "KpiModel",
    "KpiAssessment",
    "ConfigDocument",
    "DiaryEntry",
    "AuditLog",
    "Notification",
    "NotificationType",
    "QuizStatus",
    "Training",
    "TrainingPlaylist",
    "UserTraining",
]
