"""
Company email rule for team invitations.

An address may be invited to a team only when its domain is not a free mail
provider and equals the domain of the team owner's email.
"""

import re
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models.teams import Team
from database.models.users import User

FREE_EMAIL_PROVIDERS = frozenset({
    "gmail.com",
    "yahoo.com",
    "outlook.com",
    "hotmail.com",
    "live.com",
    "aol.com",
    "icloud.com",
    "protonmail.com",
    "mail.com",
    "zoho.com",
    "yandex.com",
})

EMAIL_FORMAT = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


@dataclass
class CompanyEmailValidation:
    valid: bool
    error: Optional[str] = None
    owner_domain: Optional[str] = None


def extract_email_domain(email: str) -> Optional[str]:
    """Lower-cased domain of an address, or None if there is no domain part."""
    _, sep, domain = email.rpartition("@")
    if not sep or not domain:
        return None
    return domain.lower()


def is_valid_email_format(email: str) -> bool:
    return bool(EMAIL_FORMAT.match(email))


def is_company_email(email: str) -> bool:
    """
    True when the address has a domain that is not a free mail provider.

    >>> is_company_email("user@gmail.com")
    False
    >>> is_company_email("user@acme.io")
    True
    """
    domain = extract_email_domain(email)
    if not domain:
        return False
    return domain not in FREE_EMAIL_PROVIDERS


async def validate_company_email(
    db: AsyncSession, email: str, team_id: uuid.UUID
) -> CompanyEmailValidation:
    """
    Check an invitee address against the company email rule for a team.

    Args:
        db: Database session
        email: Address to be invited
        team_id: Team the invitation is for

    Returns:
        CompanyEmailValidation with the first failing reason, if any
    """
    result = await db.execute(
        select(User.email).join(Team, Team.owner_id == User.id).where(Team.id == team_id)
    )
    owner_email = result.scalar_one_or_none()
    if owner_email is None:
        return CompanyEmailValidation(valid=False, error="Team not found")

    owner_domain = extract_email_domain(owner_email)

    if not is_valid_email_format(email):
        return CompanyEmailValidation(
            valid=False, error="Invalid email format", owner_domain=owner_domain
        )

    if not is_company_email(email):
        return CompanyEmailValidation(
            valid=False,
            error="Please use your company email address, not a free email provider",
            owner_domain=owner_domain,
        )

    if extract_email_domain(email) != owner_domain:
        return CompanyEmailValidation(
            valid=False,
            error=f"Only @{owner_domain} email addresses can be invited to this team",
            owner_domain=owner_domain,
        )

    return CompanyEmailValidation(valid=True, owner_domain=owner_domain)
