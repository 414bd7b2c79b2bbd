import re
from dataclasses import dataclass
from typing import Optional, Pattern, Sequence, Tuple

UNKNOWN = "Unknown"

# Most specific patterns first: "iPhone ... like Mac OS X" is an iPhone and
# "Android ... Linux" is Android.
OS_TABLE: Sequence[Tuple[Pattern, str]] = (
    (re.compile(r"webos", re.I), "Mobile"),
    (re.compile(r"blackberry", re.I), "BlackBerry"),
    (re.compile(r"android", re.I), "Android"),
    (re.compile(r"ipad", re.I), "iPad"),
    (re.compile(r"ipod", re.I), "iPod"),
    (re.compile(r"iphone", re.I), "iPhone"),
    (re.compile(r"ubuntu", re.I), "Ubuntu"),
    (re.compile(r"linux", re.I), "Linux"),
    (re.compile(r"mac_powerpc", re.I), "Mac OS 9"),
    (re.compile(r"macintosh|mac os x", re.I), "Mac OS X"),
    (re.compile(r"win16", re.I), "Windows 3.11"),
    (re.compile(r"win95", re.I), "Windows 95"),
    (re.compile(r"win98", re.I), "Windows 98"),
    (re.compile(r"windows me", re.I), "Windows ME"),
    (re.compile(r"windows nt 5\.0", re.I), "Windows 2000"),
    (re.compile(r"windows xp", re.I), "Windows XP"),
    (re.compile(r"windows nt 5\.1", re.I), "Windows XP"),
    (re.compile(r"windows nt 5\.2", re.I), "Windows Server 2003/XP x64"),
    (re.compile(r"windows nt 6\.0", re.I), "Windows Vista"),
    (re.compile(r"windows nt 6\.1", re.I), "Windows 7"),
    (re.compile(r"windows nt 6\.2", re.I), "Windows 8"),
    (re.compile(r"windows nt 6\.3", re.I), "Windows 8.1"),
    (re.compile(r"windows nt 10", re.I), "Windows 10"),
)

# Chrome sends "Safari" too and Edge sends "Chrome", so the later, more
# specific tokens are checked first.
BROWSER_TABLE: Sequence[Tuple[Pattern, str]] = (
    (re.compile(r"mobile", re.I), "Handheld Browser"),
    (re.compile(r"konqueror", re.I), "Konqueror"),
    (re.compile(r"maxthon", re.I), "Maxthon"),
    (re.compile(r"netscape", re.I), "Netscape"),
    (re.compile(r"opera", re.I), "Opera"),
    (re.compile(r"edge", re.I), "Edge"),
    (re.compile(r"chrome", re.I), "Chrome"),
    (re.compile(r"safari", re.I), "Safari"),
    (re.compile(r"firefox", re.I), "Firefox"),
    (re.compile(r"msie", re.I), "Internet Explorer"),
)

DEVICE_TABLE: Sequence[Tuple[Pattern, str]] = (
    (re.compile(r"mobile", re.I), "Mobile"),
    (re.compile(r"tablet", re.I), "Tablet"),
)


def match_first(table: Sequence[Tuple[Pattern, str]], agent: str, default: str = UNKNOWN) -> str:
    for pattern, label in table:
        if pattern.search(agent):
            return label
    return default


@dataclass(frozen=True)
class AgentInfo:
    device: str
    os: str
    browser: str


def parse_user_agent(agent: Optional[str]) -> AgentInfo:
    agent = agent or ""
    return AgentInfo(
        device=match_first(DEVICE_TABLE, agent, default="PC"),
        os=match_first(OS_TABLE, agent),
        browser=match_first(BROWSER_TABLE, agent),
    )
