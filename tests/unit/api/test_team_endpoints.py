"""
End-to-end tests for team, invitation and email invitation endpoints.
"""

import pytest

from tests.helpers import register


async def create_team(client, headers, name="Acme", **fields):
    response = await client.post("/api/teams", json={"name": name, **fields}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestTeamEndpoints:
    """Test team CRUD and hierarchy over HTTP."""

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, client):
        owner, headers = await register(client, "owner@acme.io", "owner")

        team = await create_team(client, headers, "Acme Studio", type="startup", city="Berlin")

        assert team["slug"] == "acme-studio"
        assert team["type"] == "COMPANY"
        assert team["is_main_team"] is True
        assert team["owner"]["id"] == owner["id"]
        assert [(m["user_id"], m["role"]) for m in team["members"]] == [(owner["id"], "OWNER")]

        by_slug = await client.get("/api/teams/acme-studio")
        by_id = await client.get(f"/api/teams/{team['id']}")
        assert by_slug.json()["id"] == by_id.json()["id"] == team["id"]

    @pytest.mark.asyncio
    async def test_create_requires_auth(self, client):
        response = await client.post("/api/teams", json={"name": "Acme"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_team(self, client):
        response = await client.get("/api/teams/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"error": "Team not found", "code": "NOT_FOUND"}

    @pytest.mark.asyncio
    async def test_search(self, client):
        _, headers = await register(client, "owner@acme.io", "owner")
        await create_team(client, headers, "Acme Studio", type="COMPANY")
        await create_team(client, headers, "Side Project")

        response = await client.get("/api/teams", params={"search": "acme", "type": "startup"})

        body = response.json()
        assert response.status_code == 200
        assert [t["team"]["name"] for t in body["teams"]] == ["Acme Studio"]
        assert body["teams"][0]["member_count"] == 1
        assert body["pagination"]["total"] == 1

    @pytest.mark.asyncio
    async def test_search_rejects_unknown_type(self, client):
        response = await client.get("/api/teams", params={"type": "guild"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_sub_teams(self, client):
        _, headers = await register(client, "owner@acme.io", "owner")
        team = await create_team(client, headers)

        created = await client.post(
            f"/api/teams/{team['id']}/sub-teams",
            json={"name": "Design", "sub_team_category": "DESIGN"},
            headers=headers,
        )
        assert created.status_code == 201
        sub = created.json()
        assert sub["parent_team_id"] == team["id"]
        assert sub["type"] == "DEPARTMENT"
        assert sub["is_main_team"] is False

        nested = await client.post(
            f"/api/teams/{sub['id']}/sub-teams", json={"name": "Icons"}, headers=headers
        )
        assert nested.status_code == 400

        listed = await client.get(f"/api/teams/{team['id']}/sub-teams")
        assert [s["team"]["name"] for s in listed.json()] == ["Design"]

        my_teams = await client.get("/api/teams/my-teams", headers=headers)
        assert [t["team"]["id"] for t in my_teams.json()] == [team["id"]]

    @pytest.mark.asyncio
    async def test_update_and_delete_owner_only(self, client):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        _, other_headers = await register(client, "other@acme.io", "other")
        team = await create_team(client, owner_headers)

        denied = await client.put(f"/api/teams/{team['id']}", json={"city": "Oslo"}, headers=other_headers)
        assert denied.status_code == 403
        assert denied.json()["code"] == "FORBIDDEN"

        updated = await client.put(f"/api/teams/{team['id']}", json={"name": "Acme Labs"}, headers=owner_headers)
        assert updated.json()["slug"] == "acme-labs"

        deleted = await client.delete(f"/api/teams/{team['id']}", headers=owner_headers)
        assert deleted.json() == {"message": "Team deleted successfully"}
        assert (await client.get(f"/api/teams/{team['id']}")).status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["name", "type"])
    async def test_update_rejects_null(self, client, field):
        _, headers = await register(client, "owner@acme.io", "owner")
        team = await create_team(client, headers)

        response = await client.put(f"/api/teams/{team['id']}", json={field: None}, headers=headers)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert (await client.get(f"/api/teams/{team['id']}")).json()["name"] == "Acme"

    @pytest.mark.asyncio
    async def test_main_team_cannot_take_category(self, client):
        _, headers = await register(client, "owner@acme.io", "owner")
        team = await create_team(client, headers)

        response = await client.put(
            f"/api/teams/{team['id']}", json={"sub_team_category": "ENGINEERING"}, headers=headers
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Only sub-teams can have a category", "code": "VALIDATION_ERROR"}
        assert (await client.get(f"/api/teams/{team['id']}")).json()["sub_team_category"] is None


class TestMemberEndpoints:

    @pytest.mark.asyncio
    async def test_add_promote_remove(self, client):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        dev, dev_headers = await register(client, "dev@acme.io", "dev")
        team = await create_team(client, owner_headers)
        base = f"/api/teams/{team['id']}/members"

        added = await client.post(base, json={"user_id": dev["id"]}, headers=owner_headers)
        assert added.status_code == 201
        assert added.json()["role"] == "MEMBER"

        duplicate = await client.post(base, json={"user_id": dev["id"]}, headers=owner_headers)
        assert duplicate.status_code == 409

        promoted = await client.put(f"{base}/{dev['id']}/role", json={"role": "ADMIN"}, headers=owner_headers)
        assert promoted.json()["role"] == "ADMIN"

        members = await client.get(base)
        assert [m["role"] for m in members.json()] == ["OWNER", "ADMIN"]

        left = await client.post(f"/api/teams/{team['id']}/leave", headers=dev_headers)
        assert left.json() == {"message": "You have left the team"}

    @pytest.mark.asyncio
    async def test_owner_cannot_leave(self, client):
        _, headers = await register(client, "owner@acme.io", "owner")
        team = await create_team(client, headers)

        response = await client.post(f"/api/teams/{team['id']}/leave", headers=headers)

        assert response.status_code == 403


class TestInviteFlows:
    """Test the unified invite and both invitation channels end to end."""

    @pytest.mark.asyncio
    async def test_same_company_user_added_directly(self, client):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        dev, _ = await register(client, "dev@acme.io", "dev", name="Dana Dev")
        team = await create_team(client, owner_headers)

        response = await client.post(
            f"/api/teams/{team['id']}/invite", json={"identifier": "dev@acme.io"}, headers=owner_headers
        )

        assert response.status_code == 201
        body = response.json()
        assert body["type"] == "direct"
        assert body["message"] == "Dana Dev was added to the team"
        assert body["member"]["user_id"] == dev["id"]

    @pytest.mark.asyncio
    async def test_in_app_invitation_accept(self, client):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        freelancer, freelancer_headers = await register(client, "jo@globex.com", "jo")
        team = await create_team(client, owner_headers)

        invited = await client.post(
            f"/api/teams/{team['id']}/invite",
            json={"identifier": "jo", "role": "ADMIN", "message": "Join us"},
            headers=owner_headers,
        )
        assert invited.json()["type"] == "internal_invitation"
        invitation = invited.json()["invitation"]
        assert invitation["receiver"]["id"] == freelancer["id"]

        received = await client.get(
            "/api/invitations/received", params={"status": "PENDING"}, headers=freelancer_headers
        )
        assert [i["id"] for i in received.json()] == [invitation["id"]]

        accepted = await client.put(f"/api/invitations/{invitation['id']}/accept", headers=freelancer_headers)
        assert accepted.status_code == 200
        assert accepted.json()["status"] == "ACCEPTED"

        again = await client.put(f"/api/invitations/{invitation['id']}/accept", headers=freelancer_headers)
        assert again.status_code == 409

        members = await client.get(f"/api/teams/{team['id']}/members")
        assert {(m["user_id"], m["role"]) for m in members.json()} >= {(freelancer["id"], "ADMIN")}

    @pytest.mark.asyncio
    async def test_in_app_invitation_decline(self, client):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        freelancer, freelancer_headers = await register(client, "jo@globex.com", "jo")
        team = await create_team(client, owner_headers)

        sent = await client.post(
            "/api/invitations",
            json={"team_id": team["id"], "receiver_id": freelancer["id"]},
            headers=owner_headers,
        )
        assert sent.status_code == 201

        declined = await client.put(f"/api/invitations/{sent.json()['id']}/decline", headers=freelancer_headers)
        assert declined.json()["status"] == "DECLINED"

    @pytest.mark.asyncio
    async def test_email_invitation_round_trip(self, client, email_service):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        team = await create_team(client, owner_headers)

        invited = await client.post(
            f"/api/teams/{team['id']}/invite", json={"identifier": "new@acme.io"}, headers=owner_headers
        )
        assert invited.status_code == 201
        assert invited.json()["type"] == "email_invitation"
        token = email_service.send_team_invitation_async.await_args.kwargs["token"]

        check = await client.get(f"/api/email-invitations/teams/{team['id']}/check", params={"email": "new@acme.io"})
        assert check.json()["exists"] is True

        validated = await client.get(f"/api/email-invitations/validate/{token}")
        assert validated.status_code == 200
        assert validated.json()["valid"] is True
        assert validated.json()["invitation"]["team"]["name"] == "Acme"

        newcomer, newcomer_headers = await register(client, "new@acme.io", "newbie")
        accepted = await client.post(f"/api/email-invitations/accept/{token}", headers=newcomer_headers)
        assert accepted.status_code == 200
        assert accepted.json()["success"] is True
        assert accepted.json()["team"]["id"] == team["id"]

        reused = await client.get(f"/api/email-invitations/validate/{token}")
        assert reused.status_code == 400
        assert reused.json()["error"] == "This invitation has already been accepted"

        members = await client.get(f"/api/teams/{team['id']}/members")
        assert newcomer["id"] in {m["user_id"] for m in members.json()}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,error", [
        ("friend@gmail.com", "Please use your company email address, not a free email provider"),
        ("dev@globex.com", "Only @acme.io email addresses can be invited to this team"),
    ])
    async def test_email_invitation_company_rule(self, client, email_service, email, error):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        team = await create_team(client, owner_headers)

        response = await client.post(
            f"/api/email-invitations/teams/{team['id']}", json={"email": email}, headers=owner_headers
        )

        assert response.status_code == 400
        assert response.json() == {"error": error, "code": "VALIDATION_ERROR"}
        email_service.send_team_invitation_async.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_email_delivery_failure(self, client, email_service):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        team = await create_team(client, owner_headers)
        email_service.send_team_invitation_async.return_value = False

        response = await client.post(
            f"/api/email-invitations/teams/{team['id']}", json={"email": "new@acme.io"}, headers=owner_headers
        )

        assert response.status_code == 502
        assert response.json()["code"] == "EMAIL_DELIVERY_FAILED"
        pending = await client.get(f"/api/email-invitations/teams/{team['id']}", headers=owner_headers)
        assert pending.json() == []

    @pytest.mark.asyncio
    async def test_email_transport_failure(self, client, email_service):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        team = await create_team(client, owner_headers)
        email_service.send_team_invitation_async.side_effect = ConnectionError("smtp down")

        response = await client.post(
            f"/api/email-invitations/teams/{team['id']}", json={"email": "new@acme.io"}, headers=owner_headers
        )

        assert response.status_code == 502
        assert response.json() == {"error": "Failed to send invitation email", "code": "EMAIL_DELIVERY_FAILED"}
        pending = await client.get(f"/api/email-invitations/teams/{team['id']}", headers=owner_headers)
        assert pending.json() == []

    @pytest.mark.asyncio
    async def test_unknown_token(self, client):
        response = await client.get(f"/api/email-invitations/validate/{'0' * 64}")

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid invitation token"

    @pytest.mark.asyncio
    async def test_non_manager_cannot_invite(self, client):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        _, other_headers = await register(client, "other@acme.io", "other")
        team = await create_team(client, owner_headers)

        response = await client.post(
            f"/api/teams/{team['id']}/invite", json={"identifier": "new@acme.io"}, headers=other_headers
        )

        assert response.status_code == 403
