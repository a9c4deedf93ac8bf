
# ---------------------------------
# TYPED EXCEPTIONS
# ---------------------------------


class ApprovalNotFoundError(LookupError):
    def __init__(self, approval_id: str):
        self.approval_id = approval_id
        super().__init__(f"Approval '{approval_id}' not found")


class ApprovalAlreadyReviewedError(RuntimeError):
    def __init__(self, approval_id: str, status: str):
        self.approval_id = approval_id
        self.status = status
        super().__init__(f"Approval '{approval_id}' already reviewed (status: {status})")


class ApprovalExecutionError(RuntimeError):
    """Raised when an approved action could not be applied and the approval was reverted."""
    pass


class InvalidApprovalRequestError(ValueError):
    pass


class ResourceNotFoundError(LookupError):
    def __init__(self, resource_type: str, resource_id: str | None):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} '{resource_id}' not found")


class UnsupportedResourceTypeError(ValueError):
    def __init__(self, resource_type: str):
        self.resource_type = resource_type
        super().__init__(f"Unsupported resource type: {resource_type}")


class BlobStorageError(RuntimeError):
    pass
