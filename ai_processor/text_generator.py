"""Announcement copy generation with a deterministic template fallback.

``TextGenerator.generate`` always returns non-empty text and never raises:
backend errors, timeouts and empty completions all fall back to the template.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Dict, Iterable, Optional

from common.clients.llm import GenerationError, LLMProvider, LLMRequest, build_generation_provider
from common.domain import JobPosting, Platform
from common.utils.config import Settings

from .prompts import PLATFORM_STYLES, build_system_prompt, build_user_prompt

logger = logging.getLogger("ai_processor.text_generator")

DEFAULT_TIMEOUT_SECONDS = 15.0


def _hashtag(value: str) -> str:
    return re.sub(r"\W+", "", value.lower())


def _clip(text: str, limit: int) -> str:
    """Cut on a word boundary so the post stays under the platform ceiling."""

    if limit <= 0 or len(text) <= limit:
        return text
    cut = text[: limit - 1]
    if " " in cut:
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip() + "…"


def render_fallback(job: JobPosting, platform: Platform, brand: str) -> str:
    """Template announcement built only from job fields."""

    title = job.title or "new team member"
    company = job.company.name or brand
    location = f" in {job.location}" if job.location else ""
    department = f" for the {job.department} team" if job.department else ""
    tags = [tag for tag in (_hashtag(company), _hashtag(brand)) if tag]

    if platform == Platform.LINKEDIN:
        pitch = job.excerpt or "A great chance to grow your career in a professional environment!"
        hashtags = " ".join(["#jobs", "#career"] + [f"#{tag}" for tag in dict.fromkeys(tags)] + ["#recruiting"])
        head = f"🚀 New opportunity: {title}\n\n{company} is looking for a {title}{department}{location}.\n\n"
        tail = f"\n\nApply now and take the next step in your career! 💼\n\n{hashtags}"
    elif platform == Platform.FACEBOOK:
        pitch = job.excerpt or "An interesting job opportunity is waiting for you!"
        hashtags = " ".join(["#jobs"] + [f"#{tag}" for tag in dict.fromkeys(tags)])
        head = f"🎯 {company} is hiring: {title}{location}\n\n"
        tail = f"\n\nApply now! 👆\n\n{hashtags}"
    else:
        details = [part for part in (job.location, job.employment_type) if part]
        suffix = f" ({', '.join(details)})" if details else ""
        head, pitch, tail = f"New job published: {title} at {company}{suffix}", "", ""

    style = PLATFORM_STYLES.get(platform)
    if style is None:
        return head + pitch + tail
    # only the pitch gives way; call to action and hashtags stay intact
    room = style.max_chars - len(head) - len(tail)
    pitch = _clip(pitch, room) if room > 0 else ""
    return _clip(head + pitch + tail, style.max_chars)


class TextGenerator:
    """Generates per-platform announcement text for a job."""

    def __init__(
        self,
        provider: LLMProvider,
        *,
        brand: str = "Wippii Work",
        language: str = "English",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._provider = provider
        self._brand = brand
        self._language = language
        self._timeout = timeout

    def fallback(self, job: JobPosting, platform: Platform) -> str:
        return render_fallback(job, platform, self._brand)

    async def _invoke(self, job: JobPosting, platform: Platform) -> str:
        style = PLATFORM_STYLES[platform]
        request = LLMRequest(
            prompt=build_user_prompt(job, platform, self._brand, self._language),
            task_type=f"announcement:{platform.value}",
            meta={
                "system_prompt": build_system_prompt(platform, self._brand),
                "max_tokens": style.max_tokens,
                "temperature": 0.7,
            },
        )
        response = await self._provider.invoke(request)
        text = (response.content or "").strip()
        if not text:
            raise GenerationError("backend returned empty text")
        logger.info(
            "generated %s text for job %s via %s/%s (%s ms)",
            platform.value,
            job.id,
            response.provider,
            response.model,
            response.latency_ms,
        )
        return _clip(text, style.max_chars)

    async def generate(self, job: JobPosting, platform: Platform) -> str:
        """Backend text within the time budget, otherwise the fallback template."""

        style = PLATFORM_STYLES.get(platform)
        if style is None or not style.use_backend:
            return self.fallback(job, platform)

        start = time.perf_counter()
        try:
            # wait_for cancels the backend call when the budget runs out
            return await asyncio.wait_for(self._invoke(job, platform), timeout=self._timeout)
        except asyncio.TimeoutError:
            reason = f"timeout after {self._timeout:g}s"
        except Exception as exc:  # noqa: BLE001
            reason = str(exc) or exc.__class__.__name__
        elapsed = int((time.perf_counter() - start) * 1000)
        logger.warning(
            "text generation failed for job %s on %s (%s, %d ms), using fallback template",
            job.id,
            platform.value,
            reason,
            elapsed,
        )
        return self.fallback(job, platform)

    async def generate_all(
        self, job: JobPosting, platforms: Iterable[Platform]
    ) -> Dict[Platform, str]:
        """Generate for every platform concurrently."""

        ordered = list(dict.fromkeys(platforms))
        texts = await asyncio.gather(*(self.generate(job, platform) for platform in ordered))
        return dict(zip(ordered, texts))

    async def aclose(self) -> None:
        await self._provider.aclose()


def build_text_generator(settings: Settings, provider: Optional[LLMProvider] = None) -> TextGenerator:
    return TextGenerator(
        provider or build_generation_provider(settings),
        brand=settings.brand_name,
        language=settings.announcement_language,
        timeout=settings.text_generation_timeout,
    )
