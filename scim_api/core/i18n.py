"""Message catalog lookup and locale negotiation for localized error messages."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from types import MappingProxyType
from typing import Any
from typing import Protocol

DEFAULT_LOCALE = "en"

DEFAULT_MESSAGES: Mapping[str, Mapping[str, str]] = {
    "en": {
        "error.invalid_request": "Invalid request: {0}",
        "error.invalid_filter": "Invalid filter expression: {0}",
        "error.invalid_path": "Invalid attribute path: {0}",
        "error.permission_denied": "Permission denied to {0} {1}",
        "error.resource_not_found": "{0} {1} does not exist",
        "error.conflict": "{0} conflicts with existing resource {1}",
        "error.precondition_failed": "Resource version does not match {0}",
        "error.http_status": "{1}",
        "user.not_found": "User {0} does not exist",
        "user.conflict": "User {0} already exists",
        "group.not_found": "Group {0} does not exist",
    },
    "de": {
        "error.invalid_request": "Ungültige Anfrage: {0}",
        "error.invalid_filter": "Ungültiger Filterausdruck: {0}",
        "error.invalid_path": "Ungültiger Attributpfad: {0}",
        "error.permission_denied": "Keine Berechtigung für {0} auf {1}",
        "error.resource_not_found": "{0} {1} existiert nicht",
        "error.conflict": "{0} steht im Konflikt mit Ressource {1}",
        "error.precondition_failed": "Ressourcenversion stimmt nicht mit {0} überein",
        "error.http_status": "{1}",
        "user.not_found": "Benutzer {0} existiert nicht",
        "user.conflict": "Benutzer {0} existiert bereits",
        "group.not_found": "Gruppe {0} existiert nicht",
    },
}


class MessageResolutionError(LookupError):
    """Raised when a message code cannot be turned into a localized string."""

    def __init__(self, code: str, locale: str, reason: str) -> None:
        super().__init__(f"Cannot resolve message '{code}' for locale '{locale}': {reason}")
        self.code = code
        self.locale = locale
        self.reason = reason


class LocalizationResolver(Protocol):
    def resolve(self, code: str, args: Sequence[Any], locale: str) -> str:
        ...


def normalize_locale(tag: str) -> str:
    """Normalize a locale tag to lower case with ``-`` separators (``de_CH`` -> ``de-ch``)."""
    return tag.strip().replace("_", "-").lower()


def _fallback_chain(locale: str, default_locale: str) -> list[str]:
    chain = [locale]
    language = locale.split("-", 1)[0]
    if language != locale:
        chain.append(language)
    if default_locale not in chain:
        chain.append(default_locale)
    return chain


class MessageCatalog:
    """In-memory, read-only message catalog.

    Templates use positional ``{0}`` placeholders. Lookup walks the exact locale,
    then its language, then the catalog default locale; a code missing from all
    of them raises :class:`MessageResolutionError`.
    """

    def __init__(
        self,
        messages: Mapping[str, Mapping[str, str]] = DEFAULT_MESSAGES,
        *,
        default_locale: str = DEFAULT_LOCALE,
    ) -> None:
        normalized = {
            normalize_locale(locale): MappingProxyType(dict(templates))
            for locale, templates in messages.items()
        }
        self._default_locale = normalize_locale(default_locale)
        if self._default_locale not in normalized:
            raise ValueError(f"default locale '{default_locale}' has no messages")
        self._messages = MappingProxyType(normalized)

    @property
    def default_locale(self) -> str:
        return self._default_locale

    @property
    def supported_locales(self) -> frozenset[str]:
        return frozenset(self._messages)

    def resolve(self, code: str, args: Sequence[Any], locale: str) -> str:
        """Return the localized message for ``code`` formatted with ``args``."""
        requested = normalize_locale(locale) if locale else self._default_locale
        for candidate in _fallback_chain(requested, self._default_locale):
            template = self._messages.get(candidate, {}).get(code)
            if template is None:
                continue
            try:
                message = template.format(*args)
            except (IndexError, KeyError, ValueError) as exc:
                raise MessageResolutionError(code, candidate, f"bad arguments ({exc})") from exc
            if not message:
                raise MessageResolutionError(code, candidate, "empty message")
            return message

        raise MessageResolutionError(code, requested, "no catalog entry")


def _quality(params: Sequence[str]) -> float | None:
    """Weight from the ``q`` parameter, ``1.0`` when absent, ``None`` when malformed."""
    for param in params:
        name, _, value = param.partition("=")
        if name.strip().lower() != "q":
            continue
        try:
            return float(value.strip())
        except ValueError:
            return None
    return 1.0


def _parse_accept_language(header: str) -> list[tuple[str, float]]:
    ranges: list[tuple[str, float]] = []
    for item in header.split(","):
        tag, *params = item.split(";")
        tag = tag.strip()
        if not tag:
            continue
        quality = _quality(params)
        if quality is not None and quality > 0:
            ranges.append((normalize_locale(tag), quality))
    return sorted(ranges, key=lambda item: item[1], reverse=True)


def negotiate_locale(accept_language: str | None, supported: Iterable[str], default: str) -> str:
    """Pick the best supported locale for an ``Accept-Language`` header value."""
    available = {normalize_locale(locale) for locale in supported}
    if not accept_language:
        return normalize_locale(default)

    for tag, _ in _parse_accept_language(accept_language):
        if tag == "*":
            break
        if tag in available:
            return tag
        language = tag.split("-", 1)[0]
        if language in available:
            return language

    return normalize_locale(default)
