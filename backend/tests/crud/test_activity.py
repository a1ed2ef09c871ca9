"""Tests for Activity and ActivityContent CRUD operations."""

import uuid
from datetime import UTC, datetime

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cfp.crud import activity, activity_content

from tests.fixtures.factories import ActivityFactory
from tests.fixtures.queries import stored_contents


@pytest.mark.database
class TestActivityCRUD:
    """Test suite for Activity CRUD operations."""

    async def test_create_activity(self, async_session: AsyncSession):
        """Test creating an activity with contents in one flush."""
        start_at = datetime(2030, 3, 1, 9, 0, tzinfo=UTC)
        end_at = datetime(2030, 3, 3, 18, 0, tzinfo=UTC)

        result = await activity.create(
            session=async_session,
            name="EuroPython 2030",
            slug="europython-2030",
            start_at=start_at,
            end_at=end_at,
            closed_at=None,
            supported_languages=["en", "de"],
            contents=[
                {"lang": "en", "title": "Call for Proposals", "description": "Talks"},
                {"lang": "de", "title": "Aufruf"},
            ],
        )

        assert isinstance(result.id, uuid.UUID)
        assert result.slug == "europython-2030"
        assert result.supported_languages == ["en", "de"]
        assert result.created_at is not None
        assert result.updated_at is not None
        assert {content.lang for content in result.contents} == {"en", "de"}
        assert all(content.activity_id == result.id for content in result.contents)

    async def test_create_duplicate_slug_violates_constraint(
        self, async_session: AsyncSession
    ):
        """Test that the slug unique constraint is enforced by the database."""
        await ActivityFactory.create_async(async_session, slug="dup")

        with pytest.raises(IntegrityError):
            await ActivityFactory.create_async(async_session, slug="dup")

    async def test_get_by_id(self, async_session: AsyncSession):
        """Test getting an activity by id with contents loaded."""
        created = await ActivityFactory.create_async(async_session)

        result = await activity.get_by_id(async_session, created.id)

        assert result is not None
        assert result.id == created.id
        assert len(result.contents) == 1

    async def test_get_by_id_not_found(self, async_session: AsyncSession):
        """Test getting an unknown activity returns None."""
        assert await activity.get_by_id(async_session, uuid.uuid4()) is None

    async def test_get_by_slug_with_lang(self, async_session: AsyncSession):
        """Test that the language filter is applied in the query."""
        await ActivityFactory.create_async(
            async_session,
            slug="multi",
            contents=[{"lang": "en", "title": "Call"}, {"lang": "zh-tw", "title": "徵稿"}],
        )

        result = await activity.get_by_slug(async_session, "multi", lang="zh-tw")

        assert result is not None
        assert [content.lang for content in result.contents] == ["zh-tw"]

    async def test_get_by_slug_without_lang(self, async_session: AsyncSession):
        """Test that all contents are loaded without a language filter."""
        await ActivityFactory.create_async(
            async_session,
            slug="multi",
            contents=[{"lang": "zh-tw", "title": "徵稿"}, {"lang": "en", "title": "Call"}],
        )

        result = await activity.get_by_slug(async_session, "multi")

        assert [content.lang for content in result.contents] == ["en", "zh-tw"]

    async def test_get_by_slug_not_found(self, async_session: AsyncSession):
        """Test getting an unknown slug returns None."""
        assert await activity.get_by_slug(async_session, "missing") is None

    async def test_exists_by_slug(self, async_session: AsyncSession):
        """Test slug existence check."""
        await ActivityFactory.create_async(async_session, slug="present")

        assert await activity.exists_by_slug(async_session, "present") is True
        assert await activity.exists_by_slug(async_session, "absent") is False

    async def test_update(self, async_session: AsyncSession):
        """Test applying column values."""
        created = await ActivityFactory.create_async(async_session)

        result = await activity.update(
            async_session, created, {"name": "Renamed", "supported_languages": ["en"]}
        )

        assert result.name == "Renamed"
        assert result.supported_languages == ["en"]


@pytest.mark.database
class TestActivityContentCRUD:
    """Test suite for ActivityContent CRUD operations."""

    async def test_upsert_inserts_missing_language(self, async_session: AsyncSession):
        """Test that upsert inserts a row for a new language."""
        created = await ActivityFactory.create_async(async_session)

        result = await activity_content.upsert(
            async_session, activity_id=created.id, lang="zh-tw", title="徵稿"
        )

        assert result.id is not None
        assert result.description is None
        contents = await stored_contents(async_session, created.id)
        assert [content.lang for content in contents] == ["en", "zh-tw"]

    async def test_upsert_updates_existing_language(self, async_session: AsyncSession):
        """Test that upsert updates the row keyed on (activity, lang)."""
        created = await ActivityFactory.create_async(
            async_session, contents=[{"lang": "en", "title": "Old", "description": "Keep"}]
        )

        result = await activity_content.upsert(
            async_session, activity_id=created.id, lang="en", title="New"
        )

        assert result.title == "New"
        assert result.description == "Keep"
        contents = await stored_contents(async_session, created.id)
        assert len(contents) == 1

    async def test_upsert_clears_description(self, async_session: AsyncSession):
        """Test that an explicit None description clears it."""
        created = await ActivityFactory.create_async(
            async_session, contents=[{"lang": "en", "title": "Old", "description": "x"}]
        )

        result = await activity_content.upsert(
            async_session, activity_id=created.id, lang="en", title="Old", description=None
        )

        assert result.description is None

    async def test_unique_activity_lang(self, async_session: AsyncSession):
        """Test that two rows for the same (activity, lang) are rejected."""
        with pytest.raises(IntegrityError):
            await ActivityFactory.create_async(
                async_session,
                contents=[{"lang": "en", "title": "One"}, {"lang": "en", "title": "Two"}],
            )

    async def test_get_by_activity_and_lang(self, async_session: AsyncSession):
        """Test looking up one content row."""
        created = await ActivityFactory.create_async(async_session)

        found = await activity_content.get_by_activity_and_lang(
            async_session, created.id, "en"
        )
        missing = await activity_content.get_by_activity_and_lang(
            async_session, created.id, "fr"
        )

        assert found is not None
        assert found.lang == "en"
        assert missing is None
