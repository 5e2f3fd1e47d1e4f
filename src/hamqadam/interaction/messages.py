"""User-facing strings, looked up from the packaged `messages.yaml` by locale."""

from __future__ import annotations

from typing import Any

from hamqadam.config.settings import Settings, get_messages
from hamqadam.domain.models import Phase

_ERROR_KEYS = (
    "transport",
    "no_route_found",
    "provider_error",
    "malformed_response",
    "missing_credential",
    "unexpected",
)


class Messages:
    """One display string per phase and per error reason, for a single locale."""

    def __init__(self, locale: str, catalog: dict[str, Any] | None = None):
        catalog = catalog if catalog is not None else get_messages()
        if locale not in catalog:
            raise ValueError(f"No messages for locale {locale!r}; available: {sorted(catalog)}")
        self.locale = locale
        self._strings: dict[str, Any] = catalog[locale]

        missing = [p.value for p in Phase if p.value not in self._strings.get("phases", {})]
        missing += [f"errors.{k}" for k in _ERROR_KEYS if k not in self._strings.get("errors", {})]
        if missing:
            raise ValueError(f"Locale {locale!r} is missing messages: {', '.join(missing)}")

    @classmethod
    def for_settings(cls, settings: Settings) -> Messages:
        return cls(settings.app.locale)

    def instruction(self, phase: Phase) -> str:
        return self._strings["phases"][phase.value]

    def loading(self) -> str:
        return self._strings["loading"]

    def error(self, reason: str) -> str:
        errors = self._strings["errors"]
        return errors.get(reason, errors["unexpected"])

    def duration(self, minutes: int) -> str:
        """Walking-time label, e.g. "About 1 h 5 min walk"."""
        templates = self._strings["duration"]
        hours, rest = divmod(max(0, int(minutes)), 60)
        if hours:
            return templates["hours_minutes"].format(hours=hours, minutes=rest)
        return templates["minutes"].format(minutes=rest)

    def match_progress(self, count: int, threshold: int) -> str:
        return self._strings["match_progress"].format(count=count, threshold=threshold)

    def matching_disabled(self) -> str:
        return self._strings["matching_disabled"]
