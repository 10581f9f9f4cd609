from __future__ import annotations

from datetime import timedelta

import pytest
from django.utils import timezone

from modules.matches.constants import MatchStatus
from modules.matches.repositories.django_repository import MatchDjangoRepository

pytestmark = pytest.mark.integration

PENDING = (MatchStatus.PENDING_ACCEPTANCE,)


@pytest.fixture()
def repo():
    return MatchDjangoRepository()


def test_get_by_id_tolerates_malformed_ids(repo):
    assert repo.get_by_id("not-a-uuid") is None


def test_conditional_update_has_single_winner(repo, make_match):
    match = make_match()

    first = repo.update_status(str(match.id), MatchStatus.ACCEPTED, PENDING)
    second = repo.update_status(str(match.id), MatchStatus.REJECTED, PENDING)

    assert first.status == MatchStatus.ACCEPTED
    assert second is None
    match.refresh_from_db()
    assert match.status == MatchStatus.ACCEPTED


def test_update_writes_details(repo, make_match):
    match = make_match()
    now = timezone.now()

    rejected = repo.update_status(
        str(match.id),
        MatchStatus.REJECTED,
        PENDING,
        rejected_at=now,
        rejection_reason="SOLD_ELSEWHERE",
    )

    assert rejected.rejected_at == now
    assert rejected.rejection_reason == "SOLD_ELSEWHERE"


def test_pending_excludes_overdue_and_orders_by_deadline(repo, make_match):
    later = make_match(expires_in=timedelta(hours=12))
    sooner = make_match(expires_in=timedelta(hours=2))
    make_match(expires_in=-timedelta(minutes=1))
    make_match(status=MatchStatus.ACCEPTED)
    make_match(farmer_id=2)

    pending = repo.find_pending_by_farmer(1, timezone.now(), limit=10)

    assert [m.id for m in pending] == [sooner.id, later.id]
    assert [m.id for m in repo.find_pending_by_farmer(1, timezone.now(), limit=1, offset=1)] == [later.id]


def test_expired_pending_respects_limit(repo, make_match):
    for minutes in (30, 20, 10):
        make_match(expires_in=-timedelta(minutes=minutes))
    make_match(status=MatchStatus.REJECTED, expires_in=-timedelta(hours=1))

    batch = repo.find_expired_pending(timezone.now(), limit=2)

    assert len(batch) == 2
    assert all(m.status == MatchStatus.PENDING_ACCEPTANCE for m in batch)
    assert batch[0].expires_at <= batch[1].expires_at
