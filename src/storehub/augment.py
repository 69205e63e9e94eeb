"""AI-generated flavor text with deterministic fallback.

``AugmentationService.generate`` never raises: any backend failure is
logged and replaced by a static, domain-appropriate string, so callers
need no error handling for it.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from enum import StrEnum

from storehub.config import AugmentConfig
from storehub.llm import LLMError, generate_text

logger = logging.getLogger(__name__)

Backend = Callable[[str], Awaitable[str]]


class PromptKind(StrEnum):
    FLASH_NEWS = "flash_news"
    TEAM_SYNERGY = "team_synergy"
    DOMAIN_SUGGESTIONS = "domain_suggestions"


_PROMPTS: dict[PromptKind, str] = {
    PromptKind.FLASH_NEWS: (
        "Buat 3 judul berita kilat yang singkat, ceria, dan bersemangat untuk "
        "running text di toko {site}. Satu judul per baris, tanpa penomoran, "
        "tanpa penjelasan tambahan."
    ),
    PromptKind.TEAM_SYNERGY: (
        "Tulis satu kalimat motivasi yang hangat dan kompak tentang sinergi tim "
        "toko {site} yang beranggotakan: {names}. Maksimal 25 kata, "
        "tanpa tanda kutip."
    ),
    PromptKind.DOMAIN_SUGGESTIONS: (
        "Berikan 5 saran nama domain unik dan profesional untuk website album "
        "kenangan {site}. Gunakan akhiran .id, .com, atau .site. Berikan hanya "
        "daftar namanya saja."
    ),
}

FALLBACKS: dict[PromptKind, str] = {
    PromptKind.FLASH_NEWS: (
        "Promo spesial minggu ini hanya di Alfamart Citaringgul X450!\n"
        "Belanja hemat, pelayanan cepat, senyum selalu."
    ),
    PromptKind.TEAM_SYNERGY: (
        "Bersama kita kuat, bersama kita hebat: melayani dengan hati setiap hari!"
    ),
    PromptKind.DOMAIN_SUGGESTIONS: "citaringgulx450.id\nalfamartx450.com\nkenangan-x450.site",
}


def render_prompt(kind: PromptKind, context: Sequence[str] | None = None, *, site: str) -> str:
    """Fill a prompt template. ``context`` is the team-member names for synergy."""
    names = ", ".join(context or ()) or "seluruh personil"
    return _PROMPTS[kind].format(site=site, names=names)


def split_lines(text: str) -> list[str]:
    """Split generated text into non-empty, stripped lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


class AugmentationService:
    """Stateless wrapper that turns any generation failure into fallback text."""

    def __init__(
        self,
        config: AugmentConfig | None = None,
        *,
        site: str = "Alfamart Citaringgul X450",
        backend: Backend | None = None,
    ) -> None:
        self.config = config or AugmentConfig()
        self.site = site
        self._backend = backend or self._default_backend

    async def _default_backend(self, prompt: str) -> str:
        return await generate_text(
            prompt,
            provider=self.config.provider,
            model=self.config.model,
            timeout=self.config.timeout,
        )

    async def generate(self, kind: PromptKind, context: Sequence[str] | None = None) -> str:
        """Return generated text for ``kind``, or its fallback on any failure."""
        prompt = render_prompt(kind, context, site=self.site)
        try:
            text = await self._backend(prompt)
        except LLMError as exc:
            logger.warning("Augmentation %s failed, using fallback: %s", kind, exc)
            return FALLBACKS[kind]
        except Exception:
            logger.warning("Augmentation %s failed, using fallback", kind, exc_info=True)
            return FALLBACKS[kind]
        if not isinstance(text, str) or not text.strip():
            logger.warning("Augmentation %s returned nothing, using fallback", kind)
            return FALLBACKS[kind]
        return text


class RefreshableText:
    """Latest generated text for one call site, guarded by a busy flag.

    ``refresh`` is skipped while a request is outstanding, so at most one
    request is in flight and the text always comes from the latest one.
    """

    def __init__(
        self,
        service: AugmentationService,
        kind: PromptKind,
        *,
        placeholder: str = "",
    ) -> None:
        self.service = service
        self.kind = kind
        self.text = placeholder
        self.busy = False

    async def refresh(self, context: Sequence[str] | None = None) -> bool:
        """Regenerate the text. Returns False if a request was already running."""
        if self.busy:
            return False
        self.busy = True
        try:
            self.text = await self.service.generate(self.kind, context)
        finally:
            self.busy = False
        return True

    @property
    def lines(self) -> list[str]:
        return split_lines(self.text)
