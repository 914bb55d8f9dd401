from unittest.mock import AsyncMock, patch

from rent_tracker.core.exceptions import ValidationError
from rent_tracker.models.user import User
from rent_tracker.schemas.user import UserCreate
from rent_tracker.services.user_service import create_user
from tests.base import BaseDBTest


class TestCreateUser(BaseDBTest):
    async def test_duplicate_email(self):
        await self.make_user("Alice")

        with self.assertRaises(ValidationError):
            await create_user(self.db, UserCreate(name="Alice", email="ALICE@example.com", phone="555-0101"))

    async def test_concurrent_registration_hits_unique_index(self):
        await self.make_user("Alice")
        data = UserCreate(name="Alice Two", email="alice@example.com", phone="555-0101")

        # the other request inserts between our lookup and our commit
        with patch("rent_tracker.services.user_service.get_user_by_email", AsyncMock(return_value=None)):
            with self.assertRaises(ValidationError) as ctx:
                await create_user(self.db, data)

        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.detail, "User with this email already exists.")
        self.assertEqual(await self.count(User), 1)

    async def test_email_stored_lower_case(self):
        user = await create_user(self.db, UserCreate(name="Bob", email="Bob@Example.com", phone="555-0102"))

        self.assertEqual(user.email, "bob@example.com")
        self.assertIsNone(user.password_hash)
