"""Utilities for mapping source files to languages and extracting fenced code.

This module provides:
1. Language profiles (display name and accepted fence tags) per file extension
2. Extraction of the first fenced code block tagged with a given language

Only the first matching block of a reply is used. Models asked for "the full
corrected file" answer with a single block; if a reply carries several, the
rest are ignored.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LanguageProfile:
    """How a language is named in prompts and tagged in fenced blocks."""

    name: str
    fence_tags: Tuple[str, ...]

    @property
    def primary_tag(self) -> str:
        return self.fence_tags[0]


CSHARP = LanguageProfile("C#", ("csharp", "cs", "c#"))

LANGUAGE_PROFILES: Dict[str, LanguageProfile] = {
    ".cs": CSHARP,
    ".py": LanguageProfile("Python", ("python", "py")),
    ".js": LanguageProfile("JavaScript", ("javascript", "js")),
    ".ts": LanguageProfile("TypeScript", ("typescript", "ts")),
    ".java": LanguageProfile("Java", ("java",)),
    ".go": LanguageProfile("Go", ("go", "golang")),
    ".cpp": LanguageProfile("C++", ("cpp", "c++")),
    ".cc": LanguageProfile("C++", ("cpp", "c++")),
    ".hpp": LanguageProfile("C++", ("cpp", "c++")),
    ".h": LanguageProfile("C++", ("cpp", "c++", "c")),
    ".c": LanguageProfile("C", ("c",)),
    ".rb": LanguageProfile("Ruby", ("ruby", "rb")),
    ".rs": LanguageProfile("Rust", ("rust", "rs")),
    ".xaml": LanguageProfile("XAML", ("xml", "xaml")),
    ".xml": LanguageProfile("XML", ("xml",)),
}


def language_for_file(file_path: str) -> LanguageProfile:
    """Returns the language profile for a file, falling back to its bare extension."""
    extension = os.path.splitext(file_path)[1].lower()
    profile = LANGUAGE_PROFILES.get(extension)
    if profile:
        return profile
    tag = extension.lstrip(".") or "text"
    logger.debug(f"No language profile for '{extension}', using generic tag '{tag}'")
    return LanguageProfile(tag, (tag,))


def _fence_pattern(profile: LanguageProfile) -> "re.Pattern[str]":
    # A tag must not run into more tag characters: "c" never matches "```cpp".
    tags = sorted(profile.fence_tags, key=len, reverse=True)
    alternatives = "|".join(re.escape(tag) for tag in tags)
    return re.compile(rf"```(?:{alternatives})(?![\w+#])\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def extract_code_block(text: str, profile: LanguageProfile = CSHARP) -> Optional[str]:
    """Extracts the inner text of the first fenced block tagged for `profile`.

    Whitespace directly after the opening tag is consumed; everything up to the
    closing fence is returned verbatim.

    Args:
        text: The model reply.
        profile: The language whose fence tags open the block.

    Returns:
        The captured code, or None when no tagged block is present.
    """
    match = _fence_pattern(profile).search(text)
    if not match:
        logger.debug(f"No ```{profile.primary_tag} block found in reply of {len(text)} chars")
        return None
    return match.group(1)
