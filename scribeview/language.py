"""
scribeview.language - Transcript language selection.

Tracks the language code used for a transcription: either the ``auto``
sentinel (let speech-to-text detect it) or one of the recognized codes.
"""

from __future__ import annotations

AUTO = "auto"

LANGUAGE_LABELS: dict[str, str] = {
    AUTO: "Auto",
    "en": "English",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
    "it": "Italian",
}

SUPPORTED_LANGUAGES = frozenset(LANGUAGE_LABELS)


def is_supported(code: str | None) -> bool:
    return code in SUPPORTED_LANGUAGES


def validate_language(code: str) -> str:
    """Return ``code`` if recognized, else raise ValueError."""
    if code not in SUPPORTED_LANGUAGES:
        valid = ", ".join(sorted(SUPPORTED_LANGUAGES))
        raise ValueError(f"language must be one of: {valid}")
    return code


class LanguageSelection:
    """Holds the currently selected transcript language."""

    def __init__(self, code: str = AUTO) -> None:
        self._code = validate_language(code)

    @property
    def code(self) -> str:
        return self._code

    @property
    def label(self) -> str:
        return LANGUAGE_LABELS[self._code]

    @property
    def is_auto(self) -> bool:
        return self._code == AUTO

    def select(self, code: str) -> None:
        """Select a language explicitly (user choice)."""
        self._code = validate_language(code)

    def apply_detected(self, code: str | None) -> bool:
        """Adopt a detected language while the selection is ``auto``.

        Returns:
            True if the selection changed
        """
        if not self.is_auto or not code or code == AUTO:
            return False
        if not is_supported(code):
            return False
        self._code = code
        return True

    def options(self) -> list[tuple[str, str]]:
        """List (code, label) pairs in display order."""
        return list(LANGUAGE_LABELS.items())

    def __repr__(self) -> str:
        return f"LanguageSelection({self._code!r})"
