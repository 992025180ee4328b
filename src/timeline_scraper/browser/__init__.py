"""browser — Playwright session helpers for the scrape worker."""
from .session import open_browser  # noqa: F401
from .stealth import build_stealth_shim, install_stealth  # noqa: F401
from .ua import build_user_agent, pick_user_agent, platform_for  # noqa: F401
