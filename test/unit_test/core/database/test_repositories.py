"""Tests for the repositories against an in-memory SQLite database."""

from datetime import timedelta

import pytest

from pdfshare.core.database.base import utc_now
from pdfshare.core.database.entities import (
    Annotation,
    File,
    FileMember,
    Invitation,
    ShareableLink,
    User,
)
from pdfshare.core.database.repositories import RepoBundle

pytestmark = pytest.mark.asyncio


async def make_file(repos: RepoBundle, owner: User, name: str = "doc.pdf") -> File:
    return await repos.files.create(
        File(name=name, storage_key=f"pdfs/{name}", owner_id=owner.id, owner_email=owner.email)
    )


class TestUserRepository:
    async def test_get_by_email_is_case_insensitive(self, repos: RepoBundle, owner: User):
        found = await repos.users.get_by_email("OWNER@example.com")
        assert found is not None
        assert found.id == owner.id

    async def test_get_by_emails(self, repos: RepoBundle, owner: User):
        await repos.users.create(User(email="bob@example.com", name="Bob"))
        found = await repos.users.get_by_emails(["bob@example.com", "ghost@example.com", "owner@example.com"])
        assert set(found) == {"bob@example.com", "owner@example.com"}
        assert await repos.users.get_by_emails([]) == {}

    async def test_get_by_verification_token(self, repos: RepoBundle):
        user = await repos.users.create(User(email="new@example.com", name="New", verification_token="tok-1"))
        assert (await repos.users.get_by_verification_token("tok-1")).id == user.id
        assert await repos.users.get_by_verification_token("tok-2") is None

    async def test_update_sets_updated_at(self, repos: RepoBundle, owner: User):
        before = owner.updated_at
        owner.name = "Renamed"
        updated = await repos.users.update(owner)
        assert updated.name == "Renamed"
        assert updated.updated_at >= before


class TestFileRepository:
    async def test_list_accessible_includes_owned_and_member_files(self, repos: RepoBundle, owner: User):
        other = await repos.users.create(User(email="other@example.com", name="Other"))
        owned = await make_file(repos, owner, "owned.pdf")
        shared = await make_file(repos, other, "shared.pdf")
        await make_file(repos, other, "private.pdf")
        await repos.members.set_role(shared.id, owner.email, "viewer")

        files = await repos.files.list_accessible(owner.email)

        assert {f.id for f in files} == {owned.id, shared.id}
        assert await repos.files.count_accessible(owner.email) == 2

    async def test_list_accessible_order_and_pagination(self, repos: RepoBundle, owner: User):
        created = []
        for i in range(5):
            file = await make_file(repos, owner, f"{i}.pdf")
            created.append((await repos.files.touch(file)).id)

        newest_first = await repos.files.list_accessible(owner.email, offset=0, limit=2)
        assert [f.id for f in newest_first] == [created[4], created[3]]

        oldest_first = await repos.files.list_accessible(owner.email, offset=2, limit=2, descending=False)
        assert [f.id for f in oldest_first] == [created[2], created[3]]

    async def test_save_xfdf_increments_version(self, repos: RepoBundle, owner: User):
        file = await make_file(repos, owner)

        saved = await repos.files.save_xfdf(file.id, "<xfdf/>")

        assert saved is not None
        assert saved.version == 1
        assert saved.xfdf == "<xfdf/>"
        assert saved.has_annotations

    async def test_save_xfdf_with_stale_version(self, repos: RepoBundle, owner: User):
        file = await make_file(repos, owner)
        await repos.files.save_xfdf(file.id, "<xfdf a='1'/>", expected_version=0)

        assert await repos.files.save_xfdf(file.id, "<xfdf a='2'/>", expected_version=0) is None
        current = await repos.files.get_by_id(file.id)
        assert current.version == 1
        assert current.xfdf == "<xfdf a='1'/>"

    async def test_save_xfdf_unknown_file(self, repos: RepoBundle):
        assert await repos.files.save_xfdf(999, "<xfdf/>") is None

    async def test_delete_cascades(self, repos: RepoBundle, owner: User):
        file = await make_file(repos, owner)
        keep = await make_file(repos, owner, "keep.pdf")
        await repos.members.set_role(file.id, "m@example.com", "editor")
        await repos.members.set_role(keep.id, "m@example.com", "viewer")
        await repos.invitations.create(Invitation(file_id=file.id, email="m@example.com", role="editor", token="i1"))
        await repos.links.create(ShareableLink(file_id=file.id, role="viewer", token="l1"))
        await repos.annotations.create(
            Annotation(file_id=file.id, creator_id=owner.id, creator_email=owner.email, xml="<a/>")
        )

        assert await repos.files.delete(file.id) is True

        assert await repos.files.get_by_id(file.id) is None
        assert await repos.members.list_for_file(file.id) == []
        assert await repos.invitations.list_for_email("m@example.com") == []
        assert await repos.links.get_by_token("l1") is None
        assert await repos.annotations.list_for_file(file.id) == []
        assert [m.role for m in await repos.members.list_for_file(keep.id)] == ["viewer"]

    async def test_delete_missing(self, repos: RepoBundle):
        assert await repos.files.delete(12345) is False


class TestFileMemberRepository:
    async def test_set_role_creates_updates_and_removes(self, repos: RepoBundle, owner: User):
        file = await make_file(repos, owner)

        created = await repos.members.set_role(file.id, "m@example.com", "viewer")
        assert isinstance(created, FileMember)
        assert created.role == "viewer"

        updated = await repos.members.set_role(file.id, "m@example.com", "editor")
        assert updated.id == created.id
        assert (await repos.members.get(file.id, "m@example.com")).role == "editor"

        assert await repos.members.set_role(file.id, "m@example.com", None) is None
        assert await repos.members.get(file.id, "m@example.com") is None

    async def test_removing_absent_member(self, repos: RepoBundle, owner: User):
        file = await make_file(repos, owner)
        assert await repos.members.set_role(file.id, "ghost@example.com", None) is None

    async def test_list_emails_in_insertion_order(self, repos: RepoBundle, owner: User):
        file = await make_file(repos, owner)
        for email in ("b@example.com", "a@example.com", "c@example.com"):
            await repos.members.set_role(file.id, email, "viewer")
        assert await repos.members.list_emails_for_file(file.id) == [
            "b@example.com",
            "a@example.com",
            "c@example.com",
        ]


class TestInvitationAndLinkRepositories:
    async def test_delete_for_email(self, repos: RepoBundle, owner: User):
        file = await make_file(repos, owner)
        await repos.invitations.create(Invitation(file_id=file.id, email="x@example.com", role="viewer", token="t1"))
        await repos.invitations.create(Invitation(file_id=file.id, email="x@example.com", role="editor", token="t2"))
        await repos.invitations.create(Invitation(file_id=file.id, email="y@example.com", role="viewer", token="t3"))

        assert await repos.invitations.delete_for_email("x@example.com") == 2
        assert await repos.invitations.list_for_email("x@example.com") == []
        assert len(await repos.invitations.list_for_email("y@example.com")) == 1

    async def test_set_enabled_for_file(self, repos: RepoBundle, owner: User):
        file = await make_file(repos, owner)
        other = await make_file(repos, owner, "other.pdf")
        await repos.links.create(ShareableLink(file_id=file.id, role="viewer", token="a"))
        await repos.links.create(ShareableLink(file_id=file.id, role="editor", token="b"))
        await repos.links.create(ShareableLink(file_id=other.id, role="viewer", token="c"))

        assert await repos.links.set_enabled_for_file(file.id, False) == 2

        assert [link.enabled for link in await repos.links.list_for_file(file.id)] == [False, False]
        assert (await repos.links.get_by_token("c")).enabled is True

    async def test_link_expiry(self, repos: RepoBundle, owner: User):
        file = await make_file(repos, owner)
        now = utc_now()
        link = await repos.links.create(
            ShareableLink(file_id=file.id, role="viewer", token="exp", expires_at=now - timedelta(seconds=1))
        )
        assert link.is_expired(now)
        assert not link.is_active(now)

        link.expires_at = None
        assert not link.is_expired(now)
        assert link.is_active(now)
