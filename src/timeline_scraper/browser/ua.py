"""User-Agent construction and best-effort randomization."""
import random

CHROME_VERSIONS = (
    "129.0.6668.100",
    "130.0.6723.117",
    "131.0.6778.86",
    "132.0.6834.110",
)

UA_TEMPLATES = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/{version} Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/{version} Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/{version} Safari/537.36",
)


def build_user_agent(chrome_version: str, template: str = "") -> str:
    """Build a User-Agent string for the given Chrome version.

    If *template* is empty, uses the Windows desktop Chrome template.
    """
    return (template or UA_TEMPLATES[0]).format(version=chrome_version)


def pick_user_agent(rng: random.Random | None = None) -> tuple[str, str]:
    """Pick a random desktop UA. Returns ``(user_agent, chrome_version)``."""
    rng = rng or random
    version = rng.choice(CHROME_VERSIONS)
    return build_user_agent(version, rng.choice(UA_TEMPLATES)), version


def platform_for(user_agent: str) -> str:
    """``navigator.userAgentData.platform`` value matching a UA string."""
    if "Windows" in user_agent:
        return "Windows"
    if "Macintosh" in user_agent:
        return "macOS"
    return "Linux"
