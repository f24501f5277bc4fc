import pytest

from app.core.device_info import (
    IP_ADDRESS_MAX_LENGTH,
    USER_AGENT_MAX_LENGTH,
    DeviceInfo,
    client_ip,
    detect_browser,
    parse_device_info,
)


@pytest.mark.parametrize(
    ("user_agent", "platform", "browser"),
    [
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36",
            "Windows",
            "Chrome",
        ),
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0",
            "Windows",
            "Edge",
        ),
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/70.0.3538.102 Safari/537.36 Edge/18.19041",
            "Windows",
            "Edge",
        ),
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36 OPR/106.0.0.0",
            "Windows",
            "Opera",
        ),
        ("Opera/9.80 (Windows NT 6.1; WOW64) Presto/2.12.388 Version/12.18", "Windows", "Opera"),
        (
            "Mozilla/5.0 (Linux; Android 13; SM-S918B) AppleWebKit/537.36 (KHTML, like Gecko) "
            "SamsungBrowser/23.0 Chrome/115.0.0.0 Mobile Safari/537.36",
            "Android",
            "Samsung Browser",
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36 Vivaldi/6.5",
            "macOS",
            "Vivaldi",
        ),
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/118.0.0.0 YaBrowser/23.11.0.0 Safari/537.36",
            "Windows",
            "Yandex",
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) "
            "Version/17.1 Safari/605.1.15",
            "macOS",
            "Safari",
        ),
        (
            "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
            "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1",
            "iOS",
            "Safari",
        ),
        (
            "Mozilla/5.0 (iPad; CPU OS 17_1 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) "
            "CriOS/120.0.6099.119 Mobile/15E148 Safari/604.1",
            "iOS",
            "Chrome",
        ),
        ("Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:120.0) Gecko/20100101 Firefox/120.0", "Ubuntu", "Firefox"),
        ("Mozilla/5.0 (X11; Linux x86_64; rv:120.0) Gecko/20100101 Firefox/120.0", "Linux", "Firefox"),
        (
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chromium/120.0.6099.71 Chrome/120.0.6099.71 Safari/537.36",
            "Linux",
            "Chromium",
        ),
        ("Mozilla/5.0 (Windows NT 6.1; Trident/7.0; rv:11.0) like Gecko", "Windows", "Internet Explorer"),
    ],
)
def test_parse_known_user_agents(user_agent, platform, browser):
    info = parse_device_info(user_agent, "192.168.1.1")
    assert info.platform == platform
    assert info.browser == browser
    assert info.device_name == f"{platform} - {browser}"
    assert info.ip_address == "192.168.1.1"
    assert info.user_agent == user_agent


@pytest.mark.parametrize("user_agent", ["garbage-string", "", None, "Mozilla/5.0", "\x00\xff"])
def test_unrecognised_input_degrades_to_unknown(user_agent):
    info = parse_device_info(user_agent, "10.0.0.1")
    assert info.platform == "Unknown"
    assert info.browser == "Unknown"
    assert info.device_name == "Unknown - Unknown"


def test_missing_ip_is_reported_unknown():
    assert parse_device_info("garbage-string", None).ip_address == "Unknown"


def test_brave_hint_overrides_chrome_token():
    ua = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    assert detect_browser(ua) == "Chrome"
    assert detect_browser(ua, "brave") == "Brave"
    assert parse_device_info(ua, "1.1.1.1", browser_hint="Brave").device_name == "Windows - Brave"
    assert detect_browser(ua, "Firefox") == "Chrome"


def test_client_ip_prefers_first_forwarded_hop():
    assert client_ip("203.0.113.5, 10.0.0.1", "198.51.100.7", "127.0.0.1") == "203.0.113.5"
    assert client_ip(None, "198.51.100.7", "127.0.0.1") == "198.51.100.7"
    assert client_ip("", "", "127.0.0.1") == "127.0.0.1"
    assert client_ip(None, None, None) == "Unknown"


def test_merge_falls_back_to_previous_snapshot():
    previous = DeviceInfo(user_agent="old-ua", ip_address="10.0.0.1", device_name="Windows - Chrome", platform="Windows", browser="Chrome")
    merged = DeviceInfo(ip_address="10.0.0.9").merged_with(previous)
    assert merged.ip_address == "10.0.0.9"
    assert merged.platform == "Windows"
    assert merged.user_agent == "old-ua"


def test_unknown_fields_fall_back_to_previous_snapshot():
    previous = parse_device_info(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36",
        "10.0.0.1",
    )

    merged = parse_device_info(None, None).merged_with(previous)

    assert merged == previous


def test_partially_known_snapshot_rebuilds_device_name():
    previous = DeviceInfo(device_name="Windows - Chrome", platform="Windows", browser="Chrome")
    merged = DeviceInfo(platform="Unknown", browser="Firefox", device_name="Unknown - Firefox").merged_with(previous)
    assert merged.device_name == "Windows - Firefox"


def test_oversized_header_values_are_clipped():
    info = parse_device_info("Mozilla/5.0 " + "x" * 600, "9" * 100)
    assert len(info.user_agent) == USER_AGENT_MAX_LENGTH
    assert len(info.ip_address) == IP_ADDRESS_MAX_LENGTH
    assert len(client_ip("1" * 100 + ", 10.0.0.1", None, None)) == IP_ADDRESS_MAX_LENGTH
