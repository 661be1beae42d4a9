"""
Tests for the credential store.
"""

import pytest

from database.users import DuplicateEmail, create_user, get_user_by_email, get_user_by_id


class TestUserStore:
    @pytest.mark.asyncio
    async def test_lookup_by_email_and_id(self, session):
        user = await create_user(session, name="Dana", email="dana@example.com", password_hash="h")
        assert (await get_user_by_email(session, " DANA@example.com ")).id == user.id
        assert (await get_user_by_id(session, str(user.id))).email == "dana@example.com"
        assert await get_user_by_id(session, "not-a-uuid") is None

    @pytest.mark.asyncio
    async def test_duplicate_email_raises_store_error(self, session):
        await create_user(session, name="Dana", email="dana@example.com", password_hash="h")
        with pytest.raises(DuplicateEmail):
            await create_user(session, name="Other", email="dana@example.com", password_hash="h")
