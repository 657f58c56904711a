"""Factories for test data."""

from typing import Optional

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Team, TeamMember, TeamRole, User


async def create_user(
    db: AsyncSession,
    email: str,
    username: Optional[str] = None,
    first_name: str = "Test",
    last_name: str = "User",
    **fields,
) -> User:
    """Insert a user directly, without a password."""
    user = User(
        email=email,
        username=username or email.split("@")[0],
        first_name=first_name,
        last_name=last_name,
        **fields,
    )
    db.add(user)
    await db.commit()
    return user


async def create_team(
    db: AsyncSession,
    owner: User,
    name: str = "Acme",
    parent: Optional[Team] = None,
    **fields,
) -> Team:
    """Insert a team with its OWNER membership."""
    team = Team(
        name=name,
        slug=f"{name.lower().replace(' ', '-')}-{owner.username}",
        owner_id=owner.id,
        parent_team_id=parent.id if parent else None,
        **fields,
    )
    db.add(team)
    await db.flush()
    db.add(TeamMember(user_id=owner.id, team_id=team.id, role=TeamRole.OWNER))
    await db.commit()
    return team


async def add_member(
    db: AsyncSession, team: Team, user: User, role: TeamRole = TeamRole.MEMBER
) -> TeamMember:
    member = TeamMember(user_id=user.id, team_id=team.id, role=role)
    db.add(member)
    await db.commit()
    return member


async def register(
    client: AsyncClient,
    email: str,
    username: str,
    name: str = "Test User",
    password: str = "password123",
) -> tuple[dict, dict]:
    """
    Register through the API.

    Returns:
        The user payload and bearer headers for it
    """
    response = await client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name, "username": username},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    return data["user"], {"Authorization": f"Bearer {data['token']}"}
