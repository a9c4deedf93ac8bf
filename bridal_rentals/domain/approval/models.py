import enum


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ActionType(str, enum.Enum):
    EDIT = "edit"
    DELETE = "delete"
    CREATE = "create"


class ResourceType(str, enum.Enum):
    CUSTOMER = "customer"
    ITEM = "item"
    PAYMENT = "payment"
    RESERVATION = "reservation"
    COST = "cost"


class ReviewAction(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"
