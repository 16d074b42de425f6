"""
Tests for TagUseCase.

Design decisions documented:
- A new tag is created with zero usages and incremented once, so its
  first use leaves it at one
- Removing a tag down to zero usages keeps the tag document
- Decrementing a tag that does not exist is logged, not raised
"""

import logging

import pytest

from projectideas.domain import IdeaTag, ProjectTag, encode_tag_name
from projectideas.domain.tests.factories import (
    IdeaTagFactory,
    ProjectTagFactory,
)
from projectideas.repositories import EmptyPointReadError, ItemConflictError
from projectideas.services.memory import MemorySearchIndex
from projectideas.use_cases import TagUseCase


class TestTagLifecycle:
    @pytest.mark.asyncio
    async def test_new_tag_starts_at_one_usage(
        self, tags: TagUseCase, tag_index: MemorySearchIndex
    ) -> None:
        await tags.update_added_and_removed_tags(["python"], None, IdeaTag)

        tag = await tags.get_tag("python", IdeaTag)
        assert tag.usages == 1
        assert tag.id in tag_index

    @pytest.mark.asyncio
    async def test_removing_new_tag_leaves_zero_usages(
        self, tags: TagUseCase
    ) -> None:
        await tags.update_added_and_removed_tags(["rust"], None, IdeaTag)
        await tags.update_added_and_removed_tags(None, ["rust"], IdeaTag)

        tag = await tags.get_tag("rust", IdeaTag)
        assert tag.usages == 0
        assert await tags.tag_exists("rust", IdeaTag)

    @pytest.mark.asyncio
    async def test_existing_tag_is_incremented(self, tags: TagUseCase) -> None:
        await tags.create_tag(IdeaTagFactory.build(name="web", usages=4))

        await tags.update_added_and_removed_tags(["web"], [], IdeaTag)

        assert (await tags.get_tag("web", IdeaTag)).usages == 5

    @pytest.mark.asyncio
    async def test_added_and_removed_in_one_call(
        self, tags: TagUseCase
    ) -> None:
        await tags.create_tag(IdeaTagFactory.build(name="old", usages=1))

        await tags.update_added_and_removed_tags(["new"], ["old"], IdeaTag)

        assert (await tags.get_tag("new", IdeaTag)).usages == 1
        assert (await tags.get_tag("old", IdeaTag)).usages == 0

    @pytest.mark.asyncio
    async def test_missing_removed_tag_is_logged(
        self, tags: TagUseCase, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            await tags.update_added_and_removed_tags(
                None, ["ghost"], IdeaTag
            )

        assert "Removed tag does not exist" in caplog.text
        assert not await tags.tag_exists("ghost", IdeaTag)


class TestTagKinds:
    @pytest.mark.asyncio
    async def test_idea_and_project_tags_are_separate(
        self, tags: TagUseCase
    ) -> None:
        await tags.update_added_and_removed_tags(["ml"], None, IdeaTag)

        assert await tags.tag_exists("ml", IdeaTag)
        assert not await tags.tag_exists("ml", ProjectTag)

    @pytest.mark.asyncio
    async def test_tag_names_needing_encoding(self, tags: TagUseCase) -> None:
        await tags.update_added_and_removed_tags(["c#"], None, ProjectTag)

        tag = await tags.get_tag("c#", ProjectTag)
        assert tag.id == encode_tag_name("c#")
        assert tag.name == "c#"

    @pytest.mark.asyncio
    async def test_listing_tags(self, tags: TagUseCase) -> None:
        await tags.create_tag(IdeaTagFactory.build(name="a"))
        await tags.create_tag(ProjectTagFactory.build(name="b"))

        assert [t.name for t in await tags.get_idea_tags()] == ["a"]
        assert [t.name for t in await tags.get_project_tags()] == ["b"]
        assert sorted(t.name for t in await tags.get_all_tags()) == [
            "a",
            "b",
        ]

    @pytest.mark.asyncio
    async def test_create_duplicate_tag_conflicts(
        self, tags: TagUseCase
    ) -> None:
        await tags.create_tag(IdeaTagFactory.build(name="dup"))

        with pytest.raises(ItemConflictError):
            await tags.create_tag(IdeaTagFactory.build(name="dup"))

    @pytest.mark.asyncio
    async def test_delete_tag(
        self, tags: TagUseCase, tag_index: MemorySearchIndex
    ) -> None:
        tag = IdeaTagFactory.build(name="gone")
        await tags.create_tag(tag)

        await tags.delete_tag(tag)

        assert tag.id not in tag_index
        with pytest.raises(EmptyPointReadError):
            await tags.get_tag("gone", IdeaTag)
