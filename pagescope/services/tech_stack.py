"""Best-effort technology detection from page markup and host name.

Detection is a plain table of signatures evaluated uniformly: a signature
fires when any of its markers is a case-insensitive substring of its source
(the HTML or the host name) and none of its ``unless`` markers is. Grow the
catalog by adding rows, not branches.
"""

from typing import Literal, NamedTuple
from urllib.parse import urlsplit

from pagescope.models.scrape_models import TechSignal


class TechSignature(NamedTuple):
    name: str
    icon: str
    markers: tuple[str, ...]
    unless: tuple[str, ...] = ()
    source: Literal["html", "host"] = "html"


TECH_SIGNATURES: tuple[TechSignature, ...] = (
    # Frontend frameworks ("__next" contains "_next")
    TechSignature("Next.js", "Next", ("_next",)),
    TechSignature("React", "React", ("react",), unless=("_next",)),
    TechSignature("Nuxt.js", "Vue", ("nuxt",)),
    TechSignature("Vue.js", "Vue", ("vue",), unless=("nuxt",)),
    TechSignature("Angular", "Angular", ("angular", "ng-version")),
    TechSignature("Svelte", "Svelte", ("svelte",)),
    # CSS frameworks
    TechSignature("Bootstrap", "Bootstrap", ("bootstrap",)),
    TechSignature("Tailwind CSS", "Tailwind", ("tailwind",)),
    TechSignature("Material-UI", "MUI", ("material-ui", "mui")),
    # Backend & CMS
    TechSignature("WordPress", "WP", ("wordpress", "wp-content")),
    TechSignature("Shopify", "Shopify", ("shopify",)),
    TechSignature("Wix", "Wix", ("wix",)),
    # Analytics & tools
    TechSignature("Google Analytics", "GA", ("google-analytics", "gtag")),
    TechSignature("jQuery", "jQuery", ("jquery",)),
    TechSignature("Cloudflare", "CF", ("cloudflare",)),
    # Meta frameworks
    TechSignature("Gatsby", "Gatsby", ("gatsby",)),
    TechSignature("Remix", "Remix", ("remix",)),
    # Hosting
    TechSignature("Vercel", "Vercel", ("vercel.app",), source="host"),
    TechSignature("Netlify", "Netlify", ("netlify.app",), source="host"),
    TechSignature("GitHub Pages", "GitHub", ("github.io",), source="host"),
)


def _matches(signature: TechSignature, haystack: str) -> bool:
    if not any(marker in haystack for marker in signature.markers):
        return False
    return not any(marker in haystack for marker in signature.unless)


def detect_tech_stack(
    html: str,
    url: str,
    signatures: tuple[TechSignature, ...] = TECH_SIGNATURES,
) -> list[TechSignal]:
    """Return one signal per matching signature, in catalog order."""
    sources = {
        "html": (html or "").lower(),
        "host": (urlsplit(url).hostname or "").lower(),
    }
    return [
        TechSignal(name=signature.name, icon=signature.icon)
        for signature in signatures
        if _matches(signature, sources[signature.source])
    ]
