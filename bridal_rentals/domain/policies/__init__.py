"""This module decides who may change what, and when a change needs review."""
from .permissions import (
    Role,
    is_admin,
    is_manager,
    needs_approval,
    can_review_approvals,
    can_view_all_approvals,
)
