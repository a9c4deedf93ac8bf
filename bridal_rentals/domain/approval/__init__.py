"""This module handles approval requests and their review."""
from .models import ApprovalStatus, ActionType, ResourceType, ReviewAction
from .approval_gate import ApprovalGate, DefaultApprovalGate
