from __future__ import annotations

import re
from dataclasses import dataclass

UNKNOWN = "Unknown"

# Column widths of the stored snapshot.
USER_AGENT_MAX_LENGTH = 512
IP_ADDRESS_MAX_LENGTH = 64


@dataclass(frozen=True)
class DeviceInfo:
    user_agent: str | None = None
    ip_address: str | None = None
    device_name: str | None = None
    platform: str | None = None
    browser: str | None = None

    def merged_with(self, fallback: DeviceInfo) -> DeviceInfo:
        """Fill fields this snapshot could not determine from ``fallback``."""
        platform = _known_or(self.platform, fallback.platform)
        browser = _known_or(self.browser, fallback.browser)
        if _is_known(self.platform) and _is_known(self.browser):
            device_name = self.device_name or fallback.device_name
        else:
            device_name = f"{platform or UNKNOWN} - {browser or UNKNOWN}"
        return DeviceInfo(
            user_agent=_known_or(self.user_agent, fallback.user_agent),
            ip_address=_known_or(self.ip_address, fallback.ip_address),
            device_name=device_name,
            platform=platform,
            browser=browser,
        )


def _is_known(value: str | None) -> bool:
    return bool(value) and value != UNKNOWN


def _known_or(value: str | None, fallback: str | None) -> str | None:
    if _is_known(value) or not fallback:
        return value
    return fallback


def _rule(pattern: str, label: str) -> tuple[re.Pattern[str], str]:
    return re.compile(pattern, re.IGNORECASE), label


# Evaluated top to bottom; browsers that embed a generic engine token
# (Chrome/Safari) must be listed before that token.
BROWSER_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    _rule(r"SamsungBrowser", "Samsung Browser"),
    _rule(r"Vivaldi", "Vivaldi"),
    _rule(r"\bEdg(?:e|A|iOS)?/", "Edge"),
    _rule(r"\bOPR/|Opera|OPiOS", "Opera"),
    _rule(r"YaBrowser|Yandex", "Yandex"),
    _rule(r"\bBrave\b", "Brave"),
    _rule(r"Chromium/", "Chromium"),
    _rule(r"CriOS|Chrome/", "Chrome"),
    _rule(r"FxiOS|Firefox/", "Firefox"),
    _rule(r"Safari/", "Safari"),
    _rule(r"MSIE |Trident/", "Internet Explorer"),
)

# iOS strings carry "like Mac OS X" and Android strings carry "Linux",
# so both sit above the generic entries they contain.
PLATFORM_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    _rule(r"Windows", "Windows"),
    _rule(r"iPhone|iPad|iPod", "iOS"),
    _rule(r"Macintosh|Mac OS X", "macOS"),
    _rule(r"Android", "Android"),
    _rule(r"\bCrOS\b", "Chrome OS"),
    _rule(r"Ubuntu", "Ubuntu"),
    _rule(r"Fedora", "Fedora"),
    _rule(r"Debian", "Debian"),
    _rule(r"Linux Mint", "Linux Mint"),
    _rule(r"openSUSE", "openSUSE"),
    _rule(r"CentOS", "CentOS"),
    _rule(r"Linux|X11", "Linux"),
)


def _first_match(rules: tuple[tuple[re.Pattern[str], str], ...], user_agent: str) -> str:
    for pattern, label in rules:
        if pattern.search(user_agent):
            return label
    return UNKNOWN


def detect_browser(user_agent: str | None, browser_hint: str | None = None) -> str:
    # Brave strips its own token from the UA; clients report it in a header instead.
    if browser_hint and browser_hint.strip().lower() == "brave":
        return "Brave"
    if not user_agent:
        return UNKNOWN
    return _first_match(BROWSER_RULES, user_agent)


def detect_platform(user_agent: str | None) -> str:
    if not user_agent:
        return UNKNOWN
    return _first_match(PLATFORM_RULES, user_agent)


def parse_device_info(
    user_agent: str | None,
    ip_address: str | None,
    *,
    browser_hint: str | None = None,
) -> DeviceInfo:
    platform = detect_platform(user_agent)
    browser = detect_browser(user_agent, browser_hint)
    return DeviceInfo(
        user_agent=(user_agent or UNKNOWN)[:USER_AGENT_MAX_LENGTH],
        ip_address=(ip_address or UNKNOWN)[:IP_ADDRESS_MAX_LENGTH],
        device_name=f"{platform} - {browser}",
        platform=platform,
        browser=browser,
    )


def client_ip(forwarded_for: str | None, real_ip: str | None, remote_host: str | None) -> str:
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop[:IP_ADDRESS_MAX_LENGTH]
    if real_ip and real_ip.strip():
        return real_ip.strip()[:IP_ADDRESS_MAX_LENGTH]
    return remote_host or UNKNOWN
