from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Iterable

from dotenv import load_dotenv

load_dotenv()


DEFAULT_DENYLIST: tuple[str, ...] = (
    "org.sufficientlysecure.keychain",
    "com.android.systemui",
)

DEFAULT_BROWSERS: tuple[str, ...] = (
    "com.android.chrome",
    "com.brave.browser",
    "com.chrome.beta",
    "com.duckduckgo.mobile.android",
    "com.microsoft.emmx",
    "com.opera.browser",
    "com.sec.android.app.sbrowser",
    "com.vivaldi.browser",
    "org.bromite.bromite",
    "org.chromium.chrome",
    "org.mozilla.fenix",
    "org.mozilla.firefox",
    "org.mozilla.focus",
    "org.mozilla.klar",
    "org.torproject.torbrowser",
)

# Browsers that report the web origin of every field, iframes included.
DEFAULT_MULTI_ORIGIN_BROWSERS: tuple[str, ...] = (
    "com.duckduckgo.mobile.android",
    "org.mozilla.fenix",
    "org.mozilla.firefox",
    "org.mozilla.focus",
    "org.mozilla.klar",
    "org.torproject.torbrowser",
)


def _list_env(name: str, default: Iterable[str]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return tuple(default)
    return _clean(raw.split(","))


def _clean(entries: Iterable[str]) -> tuple[str, ...]:
    # Origins are matched exactly, so entries are stripped but never case-folded.
    return tuple(sorted({entry.strip() for entry in entries if entry.strip()}))


@dataclass(slots=True, frozen=True)
class Settings:
    """Process-wide configuration loaded from environment variables.

    Instances are immutable so a single one can be shared by concurrent requests.
    """

    denylisted_origins: tuple[str, ...] = DEFAULT_DENYLIST
    browser_packages: tuple[str, ...] = DEFAULT_BROWSERS
    multi_origin_browsers: tuple[str, ...] = DEFAULT_MULTI_ORIGIN_BROWSERS
    max_tree_depth: int = 256
    max_tree_nodes: int = 10_000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            denylisted_origins=_list_env("AUTOFILL_DENYLIST", DEFAULT_DENYLIST),
            browser_packages=_list_env("AUTOFILL_BROWSERS", DEFAULT_BROWSERS),
            multi_origin_browsers=_list_env(
                "AUTOFILL_MULTI_ORIGIN_BROWSERS", DEFAULT_MULTI_ORIGIN_BROWSERS
            ),
            max_tree_depth=int(os.getenv("AUTOFILL_MAX_TREE_DEPTH", "256")),
            max_tree_nodes=int(os.getenv("AUTOFILL_MAX_TREE_NODES", "10000")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def is_denylisted(self, origin: str) -> bool:
        return origin in self.denylisted_origins

    def is_browser(self, origin: str) -> bool:
        return origin in self.browser_packages

    def is_single_origin_browser(self, origin: str) -> bool:
        """Browsers that cannot tell iframe origins apart only get the focused field filled."""

        return self.is_browser(origin) and origin not in self.multi_origin_browsers

    def with_denylist(self, origins: Iterable[str]) -> "Settings":
        cleaned = _clean(origins)
        if not cleaned:
            return self
        return replace(self, denylisted_origins=cleaned)
