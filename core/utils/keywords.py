"""
Keyword matching between teams and user profiles, used to suggest members.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

STOP_WORDS = frozenset({
    'the', 'be', 'to', 'of', 'and', 'a', 'in', 'that', 'have', 'i',
    'it', 'for', 'not', 'on', 'with', 'he', 'as', 'you', 'do', 'at',
    'this', 'but', 'his', 'by', 'from', 'they', 'we', 'say', 'her', 'she',
    'or', 'an', 'will', 'my', 'one', 'all', 'would', 'there', 'their', 'what',
    'so', 'up', 'out', 'if', 'about', 'who', 'get', 'which', 'go', 'me',
    'when', 'make', 'can', 'like', 'time', 'no', 'just', 'him', 'know', 'take',
    'into', 'year', 'your', 'good', 'some', 'could', 'them', 'see', 'other',
})

TEAM_TYPE_KEYWORDS: dict[str, list[str]] = {
    'ENGINEERING': ['developer', 'engineer', 'software', 'code', 'programming', 'technical',
                    'backend', 'frontend', 'fullstack', 'devops', 'architect'],
    'MARKETING': ['marketing', 'digital', 'content', 'social media', 'seo', 'campaigns',
                  'brand', 'growth', 'advertising', 'analytics'],
    'DESIGN': ['designer', 'ui', 'ux', 'creative', 'visual', 'graphics', 'figma',
               'photoshop', 'branding', 'illustration'],
    'HR': ['hr', 'human resources', 'recruitment', 'hiring', 'talent', 'people', 'culture',
           'recruiting', 'onboarding'],
    'SALES': ['sales', 'business development', 'account', 'client', 'revenue', 'deals',
              'b2b', 'b2c', 'crm', 'pipeline'],
    'PRODUCT': ['product', 'roadmap', 'strategy', 'features', 'requirements', 'user stories',
                'agile', 'scrum'],
    'OPERATIONS': ['operations', 'process', 'efficiency', 'logistics', 'supply chain',
                   'coordination', 'management'],
    'FINANCE': ['finance', 'accounting', 'financial', 'budget', 'controller', 'cfo',
                'bookkeeping'],
    'LEGAL': ['legal', 'attorney', 'lawyer', 'compliance', 'contracts', 'regulations',
              'intellectual property'],
    'SUPPORT': ['support', 'customer service', 'help desk', 'technical support',
                'customer success', 'troubleshooting'],
}

SKILL_SCORE = 10
JOB_TITLE_SCORE = 5
BIO_SCORE = 5
EXPERIENCE_ROLE_SCORE = 8
EXPERIENCE_DESCRIPTION_SCORE = 4
LOCATION_SCORE = 3


@dataclass
class ExperienceProfile:
    role: str
    description: Optional[str] = None


@dataclass
class MatchProfile:
    """The parts of a user profile that take part in matching."""

    bio: Optional[str] = None
    job_title: Optional[str] = None
    location: Optional[str] = None
    skills: list[str] = field(default_factory=list)
    experiences: list[ExperienceProfile] = field(default_factory=list)


def _overlaps(keywords: list[str], value: str) -> bool:
    """Substring match in either direction."""
    value = value.lower()
    return any(kw in value or value in kw for kw in keywords)


def extract_keywords_from_text(text: Optional[str]) -> list[str]:
    """
    Lower-cased words longer than two characters, minus stop words, in order
    of first appearance.
    """
    if not text:
        return []

    cleaned = re.sub(r'[^\w\s]', ' ', text.lower())
    words = [w for w in cleaned.split() if len(w) > 2 and w not in STOP_WORDS]
    return list(dict.fromkeys(words))


def extract_team_keywords(
    name: Optional[str] = None,
    description: Optional[str] = None,
    team_type: Optional[str] = None,
    sub_team_category: Optional[str] = None,
) -> list[str]:
    """
    Keywords describing a team.

    Args:
        name: Team name
        description: Team description
        team_type: Team type; adds category keywords when it names one
        sub_team_category: Department category of a sub-team

    Returns:
        Unique keywords in insertion order
    """
    keywords: dict[str, None] = {}

    for text in (name, description):
        for kw in extract_keywords_from_text(text):
            keywords[kw] = None

    for category in (team_type, sub_team_category):
        for kw in TEAM_TYPE_KEYWORDS.get(category or '', []):
            keywords[kw.lower()] = None

    return list(keywords)


def calculate_match_score(
    team_keywords: list[str],
    profile: MatchProfile,
    team_city: Optional[str] = None,
) -> int:
    """
    Score how well a profile matches a team's keywords.

    +10 per matching skill, +5 for a matching job title, +5 when the bio
    mentions any keyword, +8 per experience whose role matches (or +4 when
    only its description does), +3 when the team city and user location
    overlap.
    """
    score = 0

    for skill in profile.skills:
        if _overlaps(team_keywords, skill):
            score += SKILL_SCORE

    if profile.job_title and _overlaps(team_keywords, profile.job_title):
        score += JOB_TITLE_SCORE

    if profile.bio:
        bio = profile.bio.lower()
        if any(kw in bio for kw in team_keywords):
            score += BIO_SCORE

    for exp in profile.experiences:
        description = (exp.description or '').lower()
        if _overlaps(team_keywords, exp.role):
            score += EXPERIENCE_ROLE_SCORE
        elif any(kw in description for kw in team_keywords):
            score += EXPERIENCE_DESCRIPTION_SCORE

    if team_city and profile.location:
        location = profile.location.lower()
        city = team_city.lower()
        if city in location or location in city:
            score += LOCATION_SCORE

    return score


def generate_match_reason(team_keywords: list[str], profile: MatchProfile) -> str:
    """Short human-readable explanation of a match."""
    reasons = []

    matching_skills = [s for s in profile.skills if _overlaps(team_keywords, s)]
    if matching_skills:
        reasons.append(f"Skills: {', '.join(matching_skills[:3])}")

    if profile.job_title and _overlaps(team_keywords, profile.job_title):
        reasons.append(f"Role: {profile.job_title}")

    matching_exp = next(
        (exp for exp in profile.experiences if _overlaps(team_keywords, exp.role)), None
    )
    if matching_exp and not any(matching_exp.role in r for r in reasons):
        reasons.append(f"Experience: {matching_exp.role}")

    return " • ".join(reasons) if reasons else "Profile match"
