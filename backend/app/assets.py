# assets.py
# Cache busting by string substitution: versioned asset URLs in HTML, a version comment on stylesheets.
import re
from typing import Iterable


def versioned(name: str, version: int) -> str:
    return f"{name}?v={version}"


def inject_asset_versions(html: str, assets: Iterable[str], version: int) -> str:
    """Rewrite src/href references to each asset so they carry ?v=<version>.

    Any existing query string on the reference is replaced.
    """
    for name in assets:
        pattern = re.compile(r'((?:src|href)=["\'](?:\./|/)?)' + re.escape(name) + r'(\?[^"\']*)?(["\'])')
        html = pattern.sub(lambda m: m.group(1) + versioned(name, version) + m.group(3), html)
    return html


def stamp_stylesheet(css: str, version: int) -> str:
    return f"/* v{version} */\n{css}"
