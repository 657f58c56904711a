"""
End-to-end tests for profile, job, application, recommendation and
dashboard endpoints.
"""

import pytest

from tests.helpers import register


async def create_job(client, headers, team_id, title="Backend Engineer", **fields):
    payload = {"title": title, "description": "Build APIs", "type": "CONTRACT", **fields}
    response = await client.post(f"/api/jobs/teams/{team_id}", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# ==================== Profiles ==================== #

class TestProfileEndpoints:
    """Test profile, skills and portfolio endpoints."""

    @pytest.mark.asyncio
    async def test_update_profile(self, client):
        _, headers = await register(client, "pat@acme.io", "pat")

        response = await client.put(
            "/api/users/me",
            json={"job_title": "Backend Developer", "location": "Berlin", "hourly_rate": 80},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["job_title"] == "Backend Developer"
        assert data["location"] == "Berlin"
        assert data["hourly_rate"] == 80

    @pytest.mark.asyncio
    async def test_profile_lists_skills_and_portfolio(self, client):
        user, headers = await register(client, "pat@acme.io", "pat")

        skill = await client.post("/api/users/me/skills", json={"name": " Python "}, headers=headers)
        assert skill.status_code == 201
        assert skill.json()["name"] == "python"

        duplicate = await client.post("/api/users/me/skills", json={"name": "python"}, headers=headers)
        assert duplicate.status_code == 409

        portfolio = await client.post(
            "/api/users/me/portfolio", json={"name": "Checkout redesign"}, headers=headers
        )
        assert portfolio.status_code == 201

        profile = (await client.get(f"/api/users/{user['id']}")).json()
        assert profile["user"]["username"] == "pat"
        assert "email" not in profile["user"]
        assert [s["name"] for s in profile["skills"]] == ["python"]
        assert [p["name"] for p in profile["portfolios"]] == ["Checkout redesign"]
        assert profile["work_experiences"] == []

    @pytest.mark.asyncio
    async def test_update_requires_auth(self, client):
        response = await client.put("/api/users/me", json={"bio": "hi"})
        assert response.status_code == 401


# ==================== Jobs and applications ==================== #

class TestJobEndpoints:
    """Test job postings and the application workflow over HTTP."""

    @pytest.mark.asyncio
    async def test_post_and_browse(self, client):
        _, headers = await register(client, "owner@acme.io", "owner")
        team = (await client.post("/api/teams", json={"name": "Acme"}, headers=headers)).json()

        job = await create_job(client, headers, team["id"], location="Remote")

        assert job["team"]["id"] == team["id"]
        assert job["status"] == "ACTIVE"

        board = (await client.get("/api/jobs")).json()
        assert board["pagination"]["total"] == 1
        assert [j["id"] for j in board["jobs"]] == [job["id"]]

        count = await client.get(f"/api/jobs/teams/{team['id']}/count")
        assert count.json() == {"count": 1}

    @pytest.mark.asyncio
    async def test_member_cannot_post(self, client):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        member, member_headers = await register(client, "mia@acme.io", "mia")
        team = (await client.post("/api/teams", json={"name": "Acme"}, headers=owner_headers)).json()
        await client.post(
            f"/api/teams/{team['id']}/members",
            json={"user_id": member["id"], "role": "MEMBER"},
            headers=owner_headers,
        )

        response = await client.post(
            f"/api/jobs/teams/{team['id']}",
            json={"title": "Designer", "description": "Figma", "type": "FULL_TIME"},
            headers=member_headers,
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_apply_and_review(self, client):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        applicant, applicant_headers = await register(client, "fred@freelance.dev", "fred")
        team = (await client.post("/api/teams", json={"name": "Acme"}, headers=owner_headers)).json()
        job = await create_job(client, owner_headers, team["id"])

        before = await client.get(f"/api/jobs/{job['id']}/has-applied", headers=applicant_headers)
        assert before.json() == {"has_applied": False}

        applied = await client.post(
            f"/api/jobs/{job['id']}/apply",
            json={"cover_letter": "Happy to help"},
            headers=applicant_headers,
        )
        assert applied.status_code == 201
        application = applied.json()
        assert application["status"] == "PENDING"
        assert application["user"]["id"] == applicant["id"]

        again = await client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=applicant_headers)
        assert again.status_code == 409

        after = await client.get(f"/api/jobs/{job['id']}/has-applied", headers=applicant_headers)
        assert after.json() == {"has_applied": True}

        listed = await client.get(f"/api/jobs/{job['id']}/applications", headers=owner_headers)
        assert [a["id"] for a in listed.json()] == [application["id"]]

        hidden = await client.get(f"/api/jobs/{job['id']}/applications", headers=applicant_headers)
        assert hidden.status_code == 403

        reviewed = await client.patch(
            f"/api/applications/{application['id']}/status",
            json={"status": "ACCEPTED"},
            headers=owner_headers,
        )
        assert reviewed.json()["status"] == "ACCEPTED"

        withdraw = await client.delete(
            f"/api/applications/{application['id']}", headers=applicant_headers
        )
        assert withdraw.status_code == 400

    @pytest.mark.asyncio
    async def test_my_applications(self, client):
        _, owner_headers = await register(client, "owner@acme.io", "owner")
        _, applicant_headers = await register(client, "fred@freelance.dev", "fred")
        team = (await client.post("/api/teams", json={"name": "Acme"}, headers=owner_headers)).json()
        job = await create_job(client, owner_headers, team["id"])
        await client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=applicant_headers)

        mine = await client.get("/api/applications/my", headers=applicant_headers)

        assert [a["job"]["id"] for a in mine.json()] == [job["id"]]


# ==================== Recommendations and dashboard ==================== #

class TestRecommendationEndpoints:
    """Test recommendations and the dashboard over HTTP."""

    @pytest.mark.asyncio
    async def test_request_and_accept(self, client):
        sender, sender_headers = await register(client, "sam@acme.io", "sam")
        receiver, receiver_headers = await register(client, "rita@acme.io", "rita")

        created = await client.post(
            "/api/recommendations",
            json={"receiver_id": receiver["id"], "message": "Could you vouch for me?"},
            headers=sender_headers,
        )
        assert created.status_code == 201
        recommendation = created.json()
        assert recommendation["type"] == "REQUEST"
        assert recommendation["status"] == "PENDING"
        assert recommendation["sender"]["id"] == sender["id"]

        dashboard = (await client.get("/api/dashboard/user", headers=receiver_headers)).json()
        assert dashboard["statistics"]["pending_requests_received"] == 1

        sender_denied = await client.patch(
            f"/api/recommendations/{recommendation['id']}/status",
            json={"status": "ACCEPTED"},
            headers=sender_headers,
        )
        assert sender_denied.status_code == 403

        accepted = await client.patch(
            f"/api/recommendations/{recommendation['id']}/status",
            json={"status": "ACCEPTED"},
            headers=receiver_headers,
        )
        assert accepted.json()["status"] == "ACCEPTED"

        listed = (await client.get(f"/api/recommendations/user/{receiver['id']}")).json()
        assert [r["id"] for r in listed] == [recommendation["id"]]

    @pytest.mark.asyncio
    async def test_self_recommendation_rejected(self, client):
        user, headers = await register(client, "sam@acme.io", "sam")

        response = await client.post(
            "/api/recommendations",
            json={"receiver_id": user["id"], "message": "I am great"},
            headers=headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_user_dashboard(self, client):
        user, headers = await register(client, "owner@acme.io", "owner")
        await client.post("/api/teams", json={"name": "Acme"}, headers=headers)
        await client.post("/api/users/me/skills", json={"name": "python"}, headers=headers)

        response = await client.get("/api/dashboard/user", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == user["id"]
        assert data["statistics"]["teams_count"] == 1
        assert data["statistics"]["skills_count"] == 1
        assert [t["user_role"] for t in data["recent_teams"]] == ["OWNER"]
        assert data["recent_invitations"] == []

    @pytest.mark.asyncio
    async def test_dashboard_requires_auth(self, client):
        response = await client.get("/api/dashboard/user")
        assert response.status_code == 401
