from .deadlines import (
    create_deadline,
    delete_deadline,
    get_deadline,
    list_active_deadlines,
    list_deadlines,
    toggle_deadline,
    update_deadline,
)
from .submissions import (
    create_submission,
    delete_submission,
    get_submission,
    list_my_submissions,
    list_submissions,
    list_submissions_for_deadline,
    submission_stats,
    update_submission,
)

__all__ = [
    "create_deadline",
    "delete_deadline",
    "get_deadline",
    "list_active_deadlines",
    "list_deadlines",
    "toggle_deadline",
    "update_deadline",
    "create_submission",
    "delete_submission",
    "get_submission",
    "list_my_submissions",
    "list_submissions",
    "list_submissions_for_deadline",
    "submission_stats",
    "update_submission",
]
