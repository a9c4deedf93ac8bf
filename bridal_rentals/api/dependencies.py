from fastapi import Depends
from sqlalchemy.orm import Session

from bridal_rentals.api.core.container import get_container
from bridal_rentals.domain.approval import DefaultApprovalGate
from bridal_rentals.domain.approval.executor import ActionExecutor
from bridal_rentals.domain.approval.repository import ApprovalRequestRepository
from bridal_rentals.domain.approval.review import ApprovalReviewService
from bridal_rentals.domain.attachments import AttachmentRelocator
from bridal_rentals.domain.preferences import UserPreferencesRepository
from bridal_rentals.domain.resources import ResourceRepository
from bridal_rentals.domain.users import UserRepository
from bridal_rentals.infrastructure.db.connection import get_db
from bridal_rentals.infrastructure.storage import BlobStore


def get_blob_store(container=Depends(get_container)) -> BlobStore:
    return container.blob_store


def get_approval_repo(db: Session = Depends(get_db)) -> ApprovalRequestRepository:
    return ApprovalRequestRepository(db)


def get_resource_repo(db: Session = Depends(get_db)) -> ResourceRepository:
    return ResourceRepository(db)


def get_user_repo(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_preferences_repo(db: Session = Depends(get_db)) -> UserPreferencesRepository:
    return UserPreferencesRepository(db)


def get_executor(
    resources: ResourceRepository = Depends(get_resource_repo),
    blob_store: BlobStore = Depends(get_blob_store),
    container=Depends(get_container),
) -> ActionExecutor:
    relocator = AttachmentRelocator(blob_store, approvals_prefix=container.settings.approvals_prefix)
    return ActionExecutor(resources=resources, relocator=relocator, blob_store=blob_store)


def get_review_service(
    approvals: ApprovalRequestRepository = Depends(get_approval_repo),
    executor: ActionExecutor = Depends(get_executor),
) -> ApprovalReviewService:
    return ApprovalReviewService(approvals=approvals, executor=executor)


def get_approval_gate(
    approvals: ApprovalRequestRepository = Depends(get_approval_repo),
    resources: ResourceRepository = Depends(get_resource_repo),
) -> DefaultApprovalGate:
    return DefaultApprovalGate(approvals, resources)
