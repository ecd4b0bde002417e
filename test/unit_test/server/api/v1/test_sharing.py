"""API tests for invitations, role changes and shareable links."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlmodel import select

from pdfshare.core.database.entities import Invitation, ShareableLink

from ...helpers import PDF_BYTES, share, signup, upload_pdf

pytestmark = pytest.mark.asyncio


@pytest.fixture
async def owner(client: AsyncClient, mailer):
    return await signup(client, mailer, "owner@example.com", "Olivia Owner")


@pytest.fixture
async def file(client: AsyncClient, owner):
    return await upload_pdf(client, owner, "contract.pdf")


async def role_of(client: AsyncClient, headers, file_id) -> str:
    response = await client.get(f"/api/file/{file_id}/user-role", headers=headers)
    return response.json()["role"] if response.status_code == 200 else "none"


class TestInvite:
    async def test_invite_registered_and_unregistered(self, client: AsyncClient, mailer, owner, file, session):
        await signup(client, mailer, "bob@example.com", "Bob")

        response = await client.post(
            "/api/file/invite",
            headers=owner,
            json={"fileId": file["id"], "emails": ["BOB@example.com", "carol@example.com"], "role": "editor"},
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Invitations sent successfully"}
        assert "contract.pdf" in mailer.to("bob@example.com")[-1].subject
        invitation_mail = mailer.to("carol@example.com")[-1]
        assert "invitationToken=" in invitation_mail.html
        invitations = (await session.execute(select(Invitation))).scalars().all()
        assert [(i.email, i.role) for i in invitations] == [("carol@example.com", "editor")]

    async def test_single_email_field(self, client: AsyncClient, mailer, owner, file):
        viewer = await signup(client, mailer, "viewer@example.com")
        response = await client.post(
            "/api/file/invite",
            headers=owner,
            json={"fileId": str(file["id"]), "email": "viewer@example.com", "role": "viewer"},
        )
        assert response.status_code == 200
        assert await role_of(client, viewer, file["id"]) == "viewer"

    async def test_owner_address_is_skipped(self, client: AsyncClient, owner, file):
        await share(client, owner, file["id"], "owner@example.com", "viewer")
        assert await role_of(client, owner, file["id"]) == "owner"

    @pytest.mark.parametrize(
        "payload",
        [
            {"emails": [], "role": "viewer"},
            {"emails": ["x@example.com"], "role": "owner"},
            {"emails": ["not-an-email"], "role": "viewer"},
        ],
    )
    async def test_invalid_invites(self, client: AsyncClient, owner, file, payload):
        response = await client.post("/api/file/invite", headers=owner, json={"fileId": file["id"], **payload})
        assert response.status_code == 422

    async def test_only_owner_invites(self, client: AsyncClient, mailer, owner, file):
        editor = await signup(client, mailer, "editor@example.com")
        await share(client, owner, file["id"], "editor@example.com", "editor")
        response = await client.post(
            "/api/file/invite",
            headers=editor,
            json={"fileId": file["id"], "emails": ["other@example.com"], "role": "viewer"},
        )
        assert response.status_code == 403


class TestChangeRole:
    async def test_change_and_remove_role(self, client: AsyncClient, mailer, owner, file):
        member = await signup(client, mailer, "member@example.com")
        await share(client, owner, file["id"], "member@example.com", "viewer")

        changed = await client.post(
            "/api/file/change-role",
            headers=owner,
            json={"fileId": file["id"], "email": "member@example.com", "role": "editor"},
        )
        assert changed.json() == {"message": "Role changed successfully"}
        assert await role_of(client, member, file["id"]) == "editor"

        removed = await client.post(
            "/api/file/change-role",
            headers=owner,
            json={"fileId": file["id"], "email": "member@example.com", "role": "none"},
        )
        assert removed.json() == {"message": "Role removed successfully"}
        assert await role_of(client, member, file["id"]) == "none"
        assert (await client.get("/api/file/list", headers=member)).json() == []

    async def test_owner_role_cannot_change(self, client: AsyncClient, owner, file):
        response = await client.post(
            "/api/file/change-role",
            headers=owner,
            json={"fileId": file["id"], "email": "owner@example.com", "role": "viewer"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot change the owner role"

    async def test_change_roles_is_all_or_nothing(self, client: AsyncClient, mailer, owner, file):
        member = await signup(client, mailer, "member@example.com")
        await share(client, owner, file["id"], "member@example.com", "viewer")

        rejected = await client.post(
            "/api/file/change-roles",
            headers=owner,
            json={
                "fileId": file["id"],
                "changes": [
                    {"email": "member@example.com", "role": "editor"},
                    {"email": "owner@example.com", "role": "viewer"},
                ],
            },
        )
        assert rejected.status_code == 400
        assert await role_of(client, member, file["id"]) == "viewer"

        accepted = await client.post(
            "/api/file/change-roles",
            headers=owner,
            json={
                "fileId": file["id"],
                "changes": [
                    {"email": "member@example.com", "role": "editor"},
                    {"email": "new@example.com", "role": "viewer"},
                ],
            },
        )
        assert accepted.status_code == 200
        assert await role_of(client, member, file["id"]) == "editor"


class TestShareableLinks:
    async def create_link(self, client, owner, file_id, role="viewer", **extra):
        response = await client.post(
            "/api/file/shareable-link/create", headers=owner, json={"fileId": file_id, "role": role, **extra}
        )
        assert response.status_code == 201, response.text
        return response.json()

    async def test_create_and_list(self, client: AsyncClient, owner, file):
        link = await self.create_link(client, owner, file["id"], "editor")

        assert link["role"] == "editor"
        assert link["enabled"] is True
        assert link["url"] == f"http://localhost:3000/share?token={link['token']}"

        listed = await client.get(f"/api/file/{file['id']}/shareable-links", headers=owner)
        assert [item["id"] for item in listed.json()] == [link["id"]]

    async def test_past_expiry_rejected(self, client: AsyncClient, owner, file):
        past = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()
        response = await client.post(
            "/api/file/shareable-link/create",
            headers=owner,
            json={"fileId": file["id"], "role": "viewer", "expiresAt": past},
        )
        assert response.status_code == 400

    async def test_redeem_grants_role(self, client: AsyncClient, mailer, owner, file):
        guest = await signup(client, mailer, "guest@example.com")
        link = await self.create_link(client, owner, file["id"], "viewer")

        response = await client.post("/api/file/access-via-link", headers=guest, json={"token": link["token"]})

        assert response.status_code == 200
        assert response.json() == {"fileId": file["id"], "fileName": "contract.pdf", "role": "viewer"}
        assert await role_of(client, guest, file["id"]) == "viewer"

    async def test_redeem_never_downgrades(self, client: AsyncClient, mailer, owner, file):
        editor = await signup(client, mailer, "editor@example.com")
        await share(client, owner, file["id"], "editor@example.com", "editor")
        link = await self.create_link(client, owner, file["id"], "viewer")

        response = await client.post("/api/file/access-via-link", headers=editor, json={"token": link["token"]})
        assert response.json()["role"] == "editor"

        own = await client.post("/api/file/access-via-link", headers=owner, json={"token": link["token"]})
        assert own.json()["role"] == "owner"

    async def test_disabled_and_expired_links(self, client: AsyncClient, mailer, owner, file, session):
        guest = await signup(client, mailer, "guest@example.com")
        link = await self.create_link(client, owner, file["id"])

        toggled = await client.put(
            "/api/file/shareable-link/toggle", headers=owner, json={"fileId": file["id"], "enabled": False}
        )
        assert toggled.json() == {"message": "Shareable links disabled successfully", "updated": 1}
        disabled = await client.post("/api/file/access-via-link", headers=guest, json={"token": link["token"]})
        assert disabled.status_code == 403
        assert disabled.json()["detail"] == "Shareable link is disabled"

        await client.put(
            "/api/file/shareable-link/toggle", headers=owner, json={"fileId": file["id"], "enabled": True}
        )
        stored = (await session.execute(select(ShareableLink).where(ShareableLink.id == link["id"]))).scalar_one()
        stored.expires_at = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=1)
        session.add(stored)
        await session.commit()

        expired = await client.post("/api/file/access-via-link", headers=guest, json={"token": link["token"]})
        assert expired.status_code == 403
        assert expired.json()["detail"] == "Shareable link has expired"

    async def test_unknown_token(self, client: AsyncClient, owner):
        response = await client.post("/api/file/access-via-link", headers=owner, json={"token": "missing"})
        assert response.status_code == 404

    async def test_delete_link(self, client: AsyncClient, mailer, owner, file):
        other = await signup(client, mailer, "other@example.com")
        link = await self.create_link(client, owner, file["id"])

        assert (await client.delete(f"/api/file/shareable-link/{link['id']}", headers=other)).status_code == 403
        deleted = await client.delete(f"/api/file/shareable-link/{link['id']}", headers=owner)
        assert deleted.status_code == 200
        assert (await client.delete(f"/api/file/shareable-link/{link['id']}", headers=owner)).status_code == 404

    @pytest.mark.parametrize("link_id", ["0", "2147483648", "99999999999999999999"])
    async def test_delete_link_rejects_out_of_range_id(self, client: AsyncClient, owner, link_id):
        response = await client.delete(f"/api/file/shareable-link/{link_id}", headers=owner)
        assert response.status_code == 422

    async def test_anonymous_open_and_download(self, client: AsyncClient, owner, file):
        link = await self.create_link(client, owner, file["id"])
        client.cookies.clear()

        opened = await client.get("/api/file/access-via-link", params={"token": link["token"]})
        assert opened.status_code == 200
        assert opened.json()["fileName"] == "contract.pdf"

        downloaded = await client.get(
            "/api/file/access-via-link", params={"token": link["token"], "action": "download"}
        )
        assert downloaded.status_code == 200
        assert downloaded.content == PDF_BYTES

        bad = await client.get("/api/file/access-via-link", params={"token": link["token"], "action": "print"})
        assert bad.status_code == 400
