# credit_console/__init__.py
from credit_console.config import ConsoleConfig
from credit_console.gateway import APIGateway, ApiResult
from credit_console.aggregation import monthly_totals, distribution
from credit_console.review import ApplicationReviewStateMachine, ReviewState
from credit_console.dashboard import DashboardOrchestrator
from credit_console.submission import SubmissionOrchestrator, SubmissionForm

__all__ = [
    "ConsoleConfig",
    "APIGateway",
    "ApiResult",
    "monthly_totals",
    "distribution",
    "ApplicationReviewStateMachine",
    "ReviewState",
    "DashboardOrchestrator",
    "SubmissionOrchestrator",
    "SubmissionForm",
]
