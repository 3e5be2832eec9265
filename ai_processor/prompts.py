"""Prompt text and per-platform style guides for job announcements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from common.domain import JobPosting, Platform


@dataclass(frozen=True)
class PlatformStyle:
    label: str
    tone: str
    max_chars: int
    max_tokens: int
    hashtags: str
    use_backend: bool = True


PLATFORM_STYLES: Dict[Platform, PlatformStyle] = {
    Platform.LINKEDIN: PlatformStyle(
        label="LinkedIn",
        tone=(
            "Professional but warm. May be a little longer and more detailed. "
            "Highlight career opportunities and growth. Use emoji sparingly, for clarity only."
        ),
        max_chars=1300,
        max_tokens=1000,
        hashtags="Use relevant professional hashtags such as #jobs #recruiting #<city>.",
    ),
    Platform.FACEBOOK: PlatformStyle(
        label="Facebook",
        tone=(
            "Relaxed and personal. Shorter and punchier. More emoji to liven things up. "
            "Highlight the good sides of the workplace and the community. Easy to read and share."
        ),
        max_chars=500,
        max_tokens=800,
        hashtags="Use hashtags sparingly.",
    ),
    Platform.GOOGLE_CHAT: PlatformStyle(
        label="Google Chat",
        tone="Plain internal notice.",
        max_chars=400,
        max_tokens=0,
        hashtags="No hashtags.",
        use_backend=False,
    ),
}

SYSTEM_PROMPT = """\
You write job announcements for {brand}.

HEADLINE
Always in the form: [Company] is hiring a [role] - apply now!
Vary it naturally, for example:
- Job open now: [role] @ [Company]
- Join the [Company] team as a [role]!
- New opportunity: [role] @ [Company]

DESCRIPTION (3-4 sentences)
1. What the work is and why it matters
2. What kind of person fits (no age or seniority assumptions)
3. Why it is attractive (local, team spirit, career, flexibility)
4. A call to action

STYLE
- Concise, human, positive, approachable
- No HR jargon: write as if explaining to a good friend
- {brand} voice: clear and genuine

PLATFORM: {label}
- {tone}
- {hashtags}
"""

USER_PROMPT = """\
Write a {label} post for a new job opening.

Job details:
- Title: {title}
- Company: {company}
- Location: {location}
- Department: {department}
- Employment type: {employment_type}
- Description: {description}

The post must:
- Be engaging and professional
- Include relevant hashtags
- Encourage people to apply, ending with a call to action
- Stay under {max_chars} characters
- Be written in {language}
- Highlight {brand} as the recruiting partner

IMPORTANT: do NOT include any URLs or web addresses. The link is attached automatically.
"""

NOT_SPECIFIED = "Not specified"


def build_system_prompt(platform: Platform, brand: str) -> str:
    style = PLATFORM_STYLES[platform]
    return SYSTEM_PROMPT.format(brand=brand, label=style.label, tone=style.tone, hashtags=style.hashtags)


def build_user_prompt(job: JobPosting, platform: Platform, brand: str, language: str) -> str:
    style = PLATFORM_STYLES[platform]
    return USER_PROMPT.format(
        label=style.label,
        title=job.title or NOT_SPECIFIED,
        company=job.company.name or brand,
        location=job.location or NOT_SPECIFIED,
        department=job.department or NOT_SPECIFIED,
        employment_type=job.employment_type or NOT_SPECIFIED,
        description=job.excerpt or job.body[:200] or NOT_SPECIFIED,
        max_chars=style.max_chars,
        language=language,
        brand=brand,
    ).strip()
