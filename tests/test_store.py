"""Unit tests for auth/store.py -- UserStore persistence.

Covers:
- insert_unique() assigns id and created_at
- find_by_email() is exact and case-sensitive
- find_by_id() round-trips the assigned id
- insert_unique() raises EmailAlreadyExists on a duplicate email
- public() needs a stored id
"""

import pytest

from auth.models import User
from auth.store import EmailAlreadyExists, UserStore


@pytest.mark.asyncio
async def test_insert_assigns_id_and_timestamp(store: UserStore) -> None:
    user = await store.insert_unique(User(email="a@x.com", hashed_password="h"))
    assert user.id
    assert user.created_at
    assert user.email == "a@x.com"


@pytest.mark.asyncio
async def test_ids_are_unique(store: UserStore) -> None:
    first = await store.insert_unique(User(email="a@x.com", hashed_password="h"))
    second = await store.insert_unique(User(email="b@x.com", hashed_password="h"))
    assert first.id != second.id


@pytest.mark.asyncio
async def test_find_by_email(store: UserStore) -> None:
    created = await store.insert_unique(User(email="a@x.com", hashed_password="stored-hash"))
    found = await store.find_by_email("a@x.com")
    assert found is not None
    assert found.id == created.id
    assert found.hashed_password == "stored-hash"


@pytest.mark.asyncio
async def test_find_by_email_missing_returns_none(store: UserStore) -> None:
    assert await store.find_by_email("nobody@x.com") is None


@pytest.mark.asyncio
async def test_find_by_email_is_case_sensitive(store: UserStore) -> None:
    await store.insert_unique(User(email="a@x.com", hashed_password="h"))
    assert await store.find_by_email("A@X.COM") is None
    assert await store.find_by_email(" a@x.com") is None


@pytest.mark.asyncio
async def test_find_by_id(store: UserStore) -> None:
    created = await store.insert_unique(User(email="a@x.com", hashed_password="h"))
    found = await store.find_by_id(created.id)
    assert found is not None
    assert found.email == "a@x.com"
    assert await store.find_by_id("0" * 32) is None


@pytest.mark.asyncio
async def test_duplicate_email_raises(store: UserStore) -> None:
    await store.insert_unique(User(email="a@x.com", hashed_password="h1"))
    with pytest.raises(EmailAlreadyExists):
        await store.insert_unique(User(email="a@x.com", hashed_password="h2"))
    # The first record is untouched.
    found = await store.find_by_email("a@x.com")
    assert found is not None
    assert found.hashed_password == "h1"


@pytest.mark.asyncio
async def test_emails_differing_in_case_are_distinct(store: UserStore) -> None:
    lower = await store.insert_unique(User(email="a@x.com", hashed_password="h"))
    upper = await store.insert_unique(User(email="A@x.com", hashed_password="h"))
    assert lower.id != upper.id


@pytest.mark.asyncio
async def test_stored_user_public_form(store: UserStore) -> None:
    created = await store.insert_unique(User(email="a@x.com", hashed_password="h"))
    public = created.public()
    assert public.id == created.id
    assert public.email == "a@x.com"
    assert not hasattr(public, "hashed_password")


def test_unsaved_user_has_no_public_form() -> None:
    with pytest.raises(ValueError):
        User(email="a@x.com", hashed_password="h").public()
