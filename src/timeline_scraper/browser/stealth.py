"""Fingerprint-evasion shim for headless Chromium.

Values are parameterized so the shim agrees with the user agent chosen for
the session.
"""
import json
import logging

log = logging.getLogger(__name__)


def build_stealth_shim(
    chrome_version: str,
    *,
    platform: str = "Windows",
    languages: tuple[str, ...] = ("en-US", "en"),
    hardware_concurrency: int = 8,
    device_memory: int = 8,
    screen_width: int = 1920,
    screen_height: int = 1080,
) -> str:
    """Build a JS shim that hides the common headless tells."""
    major_js = json.dumps(chrome_version.split(".")[0])
    platform_js = json.dumps(platform)
    languages_js = json.dumps(list(languages))
    language_js = json.dumps(languages[0] if languages else "en-US")
    return f"""
    (() => {{
        Object.defineProperty(navigator, 'webdriver', {{
            get: () => undefined, configurable: true,
        }});

        const brands = [
            {{ brand: "Chromium", version: {major_js} }},
            {{ brand: "Google Chrome", version: {major_js} }},
            {{ brand: "Not/A)Brand", version: "99" }},
        ];
        Object.defineProperty(navigator, 'userAgentData', {{
            get: () => ({{
                brands: brands,
                mobile: false,
                platform: {platform_js},
                getHighEntropyValues: () => Promise.resolve({{
                    brands: brands, mobile: false, platform: {platform_js},
                }}),
                toJSON: () => ({{ brands: brands, mobile: false, platform: {platform_js} }}),
            }}),
            configurable: true,
        }});

        Object.defineProperty(navigator, 'languages', {{
            get: () => {languages_js}, configurable: true,
        }});
        Object.defineProperty(navigator, 'language', {{
            get: () => {language_js}, configurable: true,
        }});
        Object.defineProperty(navigator, 'hardwareConcurrency', {{
            get: () => {hardware_concurrency}, configurable: true,
        }});
        Object.defineProperty(navigator, 'deviceMemory', {{
            get: () => {device_memory}, configurable: true,
        }});
        Object.defineProperty(navigator, 'plugins', {{
            get: () => [1, 2, 3], configurable: true,
        }});

        // outer === inner is a headless tell
        Object.defineProperty(window, 'outerHeight', {{
            get: () => window.innerHeight + 85, configurable: true,
        }});
        Object.defineProperty(window, 'outerWidth', {{
            get: () => window.innerWidth, configurable: true,
        }});
        Object.defineProperty(screen, 'width', {{
            get: () => {screen_width}, configurable: true,
        }});
        Object.defineProperty(screen, 'height', {{
            get: () => {screen_height}, configurable: true,
        }});

        if (!window.chrome) {{
            window.chrome = {{ runtime: {{}} }};
        }}
    }})();
    """


def install_stealth(context, chrome_version: str, **shim_kwargs) -> bool:
    """Register the shim to run before any page script. Returns success."""
    try:
        context.add_init_script(build_stealth_shim(chrome_version, **shim_kwargs))
        return True
    except Exception as e:
        log.warning(f"Stealth init script failed ({e}); continuing without it")
        return False
