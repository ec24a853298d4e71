"""浏览器身份 profile -- 桌面 / 移动两套请求头

部分站点按客户端类型返回不同标记，调用方按 stage 选择。
"""

from enum import StrEnum


class ClientProfile(StrEnum):
    DESKTOP = "desktop"
    MOBILE = "mobile"


_COMMON_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
    "Accept-Encoding": "gzip, deflate",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
}

PROFILE_HEADERS: dict[ClientProfile, dict[str, str]] = {
    ClientProfile.DESKTOP: {
        **_COMMON_HEADERS,
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
        ),
        "Accept-Language": "en-US,en;q=0.9,hi;q=0.8",
        "Cache-Control": "max-age=0",
    },
    ClientProfile.MOBILE: {
        **_COMMON_HEADERS,
        "User-Agent": (
            "Mozilla/5.0 (Linux; Android 14; SM-S928B) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/125.0.0.0 Mobile Safari/537.36"
        ),
        "Accept-Language": "en-US,en;q=0.9",
    },
}

# 调用外部解析服务时使用的标识
DELEGATE_USER_AGENT = "MflixPro/1.0"


def headers_for(profile: ClientProfile, **extra: str) -> dict[str, str]:
    """返回指定 profile 的请求头副本，可追加额外头"""
    return {**PROFILE_HEADERS[profile], **extra}
