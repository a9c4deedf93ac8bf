from datetime import datetime, timedelta

from bridal_rentals.core.clock import utcnow
from bridal_rentals.domain.approval.entities import ApprovalFilters, Pagination, Sorting
from bridal_rentals.domain.approval.repository import ApprovalRequestRepository
from bridal_rentals.infrastructure.db.models import ApprovalRequest


def _seed(db) -> None:
    start = datetime(2025, 5, 1, 9, 0)
    rows = [
        ("u-employee", "edit", "customer", "pending"),
        ("u-employee", "delete", "cost", "approved"),
        ("u-other", "create", "payment", "pending"),
        ("u-other", "edit", "reservation", "rejected"),
        ("u-employee", "create", "item", "pending"),
    ]
    for i, (requested_by, action, resource, status) in enumerate(rows):
        db.add(
            ApprovalRequest(
                id=f"a{i}",
                requested_by=requested_by,
                action_type=action,
                resource_type=resource,
                resource_id=None if action == "create" else f"r{i}",
                original_data={},
                new_data={"x": i},
                status=status,
                created_at=start + timedelta(minutes=i),
            )
        )
    db.commit()


def test_get_all_filters_and_paginates(db) -> None:
    _seed(db)
    repo = ApprovalRequestRepository(db)

    page = repo.get_all(
        filters=ApprovalFilters(status="pending"),
        paging=Pagination(limit=2, offset=0),
        sorting=Sorting(),
    )

    assert page.meta.total == 3
    assert [a.id for a in page.data] == ["a4", "a2"]
    assert page.meta.has_next is True
    assert page.meta.has_previous is False


def test_get_all_combines_filters_and_sorts_ascending(db) -> None:
    _seed(db)
    repo = ApprovalRequestRepository(db)

    page = repo.get_all(
        filters=ApprovalFilters(requested_by="u-employee", action_type="create"),
        paging=Pagination(limit=10, offset=0),
        sorting=Sorting(sort_by="created_at", sort_order="asc"),
    )

    assert [a.id for a in page.data] == ["a4"]

    everything = repo.get_all(
        filters=ApprovalFilters(),
        paging=Pagination(limit=10, offset=1),
        sorting=Sorting(sort_by="created_at", sort_order="asc"),
    )
    assert everything.meta.total == 5
    assert [a.id for a in everything.data] == ["a1", "a2", "a3", "a4"]
    assert everything.meta.has_previous is True


def test_count_and_requester_listing(db) -> None:
    _seed(db)
    repo = ApprovalRequestRepository(db)

    assert repo.count_pending() == 3
    assert [a.id for a in repo.list_for_requester("u-other")] == ["a3", "a2"]
    assert repo.delete("a3") is True
    assert repo.delete("a3") is False
    assert repo.get("a3") is None


def test_review_timestamps_are_naive_utc(db) -> None:
    _seed(db)
    repo = ApprovalRequestRepository(db)
    before = utcnow()

    assert repo.mark_approved("a0", "u-admin") is True

    reviewed = repo.get("a0")
    assert reviewed.reviewed_at.tzinfo is None
    assert before <= reviewed.reviewed_at <= utcnow()
    # Timestamps from the database default share the same form
    assert reviewed.updated_at.tzinfo is None
