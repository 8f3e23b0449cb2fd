from __future__ import annotations

import uuid

import pytest

from cinevault.core.config import settings
from cinevault.models.suggestion import SuggestionStatus
from cinevault.services import suggestion_service


@pytest.fixture(autouse=True)
def _privileged_moderator(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "privileged_caller_ids", ["moderator"])


@pytest.mark.asyncio
async def test_submit_creates_pending_suggestion(session) -> None:
    suggestion = await suggestion_service.submit(
        session, "viewer-1", imdb_id="tt6751668", title="Parasite", payload={"Plot": "Better synopsis"}
    )
    assert suggestion.status == SuggestionStatus.PENDING
    assert suggestion.submitted_by == "viewer-1"
    assert suggestion.created_at.tzinfo is not None
    assert suggestion.reviewed_at is None


@pytest.mark.asyncio
async def test_only_privileged_callers_see_pending(session) -> None:
    first = await suggestion_service.submit(session, "viewer-1", title="First")
    second = await suggestion_service.submit(session, "viewer-2", title="Second")

    assert await suggestion_service.list_pending(session, "viewer-1") == []
    assert await suggestion_service.list_pending(session, None) == []
    pending = await suggestion_service.list_pending(session, "moderator")
    assert {item.id for item in pending} == {first.id, second.id}


@pytest.mark.asyncio
async def test_review_requires_privilege(session) -> None:
    suggestion = await suggestion_service.submit(session, "viewer-1", title="Parasite")

    assert await suggestion_service.approve(session, "viewer-1", suggestion.id) is None
    await session.refresh(suggestion)
    assert suggestion.status == SuggestionStatus.PENDING

    approved = await suggestion_service.approve(session, "moderator", suggestion.id)
    assert approved.status == SuggestionStatus.APPROVED
    assert approved.reviewed_by == "moderator"
    assert approved.reviewed_at is not None
    assert await suggestion_service.list_pending(session, "moderator") == []


@pytest.mark.asyncio
async def test_reject_and_missing_suggestion(session) -> None:
    suggestion = await suggestion_service.submit(session, None, title="Unknown")
    rejected = await suggestion_service.reject(session, "moderator", suggestion.id)
    assert rejected.status == SuggestionStatus.REJECTED

    assert await suggestion_service.reject(session, "moderator", uuid.uuid4()) is None


def test_privilege_list_parses_csv() -> None:
    parsed = settings.__class__(privileged_caller_ids="alice, bob")
    assert parsed.privileged_caller_ids == ["alice", "bob"]
    assert parsed.is_privileged(" bob ") is True
    assert parsed.is_privileged(None) is False
