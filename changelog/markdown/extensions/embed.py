# changelog/markdown/extensions/embed.py
"""
Rich embeds for third-party content.

    [embed:youtube](https://www.youtube.com/watch?v=dQw4w9WgXcQ){autoplay:1,mute:1}
    [embed:codepen](https://codepen.io/username/pen/abc123){height:500,theme:dark}
    [embed:figma](https://www.figma.com/file/abc123/Design-File){height:600}
    [embed:github](https://github.com/user/repo)
    [embed:spotify](https://open.spotify.com/track/4iV5W9uYEdYUVa79Axb7Rh)
    [embed:vimeo](https://vimeo.com/123456789){autoplay:1}

Options are comma-separated ``key:value`` pairs. A URL the provider cannot
make sense of renders an error card with the reason and the URL.
"""

import logging
import re
from urllib.parse import quote, urlencode, urlparse

from ..types import Extension, ParseRule, RenderRule, Token
from ..utils import escape_html

logger = logging.getLogger(__name__)

EMBED_PATTERN = re.compile(r"\[embed:(\w+)\]\(([^)]+)\)(?:\{([^}]+)\})?")

CARD_CLASSES = "rounded-lg border bg-card text-card-foreground shadow-sm mb-6 overflow-hidden"

RESPONSIVE_WRAPPER_STYLE = "position: relative; padding-bottom: 56.25%; height: 0; overflow: hidden;"
RESPONSIVE_IFRAME_STYLE = "position: absolute; top: 0; left: 0; width: 100%; height: 100%; border: 0;"

YOUTUBE_ID_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/shorts/)([^&\n?#]+)"),
    re.compile(r"youtube\.com/watch\?.*v=([^&\n?#]+)"),
]
VIMEO_ID_PATTERN = re.compile(r"vimeo\.com/(?:.*/)?(\d+)")
CODEPEN_PATTERNS = [
    re.compile(r"codepen\.io/([^/]+)/(?:pen|embed)/([^/?#]+)"),
    re.compile(r"codepen\.io/([^/]+)/details/([^/?#]+)"),
]

EXTERNAL_ICON_PATH = (
    '<path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
    'd="M10 6H6a2 2 0 00-2 2v10a2 2 0 002 2h10a2 2 0 002-2v-4M14 4h6m0 0v6m0-6L10 14"/>'
)

TWITTER_ICON_PATH = (
    '<path d="M23.953 4.57a10 10 0 01-2.825.775 4.958 4.958 0 002.163-2.723c-.951.555-2.005.959-3.127 '
    "1.184a4.92 4.92 0 00-8.384 4.482C7.69 8.095 4.067 6.13 1.64 3.162a4.822 4.822 0 00-.666 2.475c0 "
    "1.71.87 3.213 2.188 4.096a4.904 4.904 0 01-2.228-.616v.06a4.923 4.923 0 003.946 4.827 4.996 4.996 0 "
    "01-2.212.085 4.936 4.936 0 004.604 3.417 9.867 9.867 0 01-6.102 2.105c-.39 0-.779-.023-1.17-.067a13.995 "
    "13.995 0 007.557 2.209c9.053 0 13.998-7.496 13.998-13.985 0-.21 0-.42-.015-.63A9.935 9.935 0 0024 4.59z\"/>"
)

GITHUB_ICON_PATH = (
    '<path d="M12 0c-6.626 0-12 5.373-12 12 0 5.302 3.438 9.8 8.207 11.387.599.111.793-.261.793-.577v-2.234c'
    "-3.338.726-4.033-1.416-4.033-1.416-.546-1.387-1.333-1.756-1.333-1.756-1.089-.745.083-.729.083-.729 "
    "1.205.084 1.839 1.237 1.839 1.237 1.07 1.834 2.807 1.304 3.492.997.107-.775.418-1.305.762-1.604-2.665"
    "-.305-5.467-1.334-5.467-5.931 0-1.311.469-2.381 1.236-3.221-.124-.303-.535-1.524.117-3.176 0 0 "
    "1.008-.322 3.301 1.23.957-.266 1.983-.399 3.003-.404 1.02.005 2.047.138 3.006.404 2.291-1.552 "
    "3.297-1.23 3.297-1.23.653 1.653.242 2.874.118 3.176.77.84 1.235 1.911 1.235 3.221 0 4.609-2.807 "
    "5.624-5.479 5.921.43.372.823 1.102.823 2.222v3.293c0 .319.192.694.801.576 4.765-1.589 8.199-6.086 "
    '8.199-11.386 0-6.627-5.373-12-12-12z"/>'
)

LINK_ICON_PATH = (
    '<path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
    'd="M13.828 10.172a4 4 0 00-5.656 0l-4 4a4 4 0 105.656 5.656l1.102-1.101m-.758-4.899a4 4 0 '
    '005.656 0l4-4a4 4 0 00-5.656-5.656l-1.1 1.1"/>'
)

ERROR_ICON_PATH = (
    '<path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
    'd="M12 8v4m0 4h.01M21 12a9 9 0 11-18 0 9 9 0 0118 0z"/>'
)


def parse_options(options: str) -> dict[str, str]:
    """Parse ``"height:400,theme:dark"`` into a dict; incomplete pairs are ignored."""
    parsed = {}
    if not options:
        return parsed

    for option in options.split(","):
        key, _, value = option.partition(":")
        key, value = key.strip(), value.strip()
        if key and value:
            parsed[key] = value

    return parsed


def extract_youtube_id(url: str):
    for pattern in YOUTUBE_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def extract_vimeo_id(url: str):
    match = VIMEO_ID_PATTERN.search(url)
    return match.group(1) if match else None


def extract_codepen_ids(url: str):
    """Return ``(user, pen_id)`` or None."""
    for pattern in CODEPEN_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1), match.group(2)
    return None


def extract_domain(url: str) -> str:
    try:
        return urlparse(url).hostname or url
    except ValueError:
        return url


def _iframe_card(iframe: str, classes: str) -> str:
    return f'<div class="{classes}">\n{iframe}\n</div>'


def _link_card(icon: str, title: str, subtitle: str, url: str, link_text: str, classes: str) -> str:
    return (
        f'<div class="{classes}">\n'
        '  <div class="p-4">\n'
        '    <div class="flex items-center gap-3 mb-3">\n'
        f"      {icon}\n"
        "      <div>\n"
        f'        <div class="font-semibold text-foreground">{title}</div>\n'
        f'        <div class="text-sm text-muted-foreground">{subtitle}</div>\n'
        "      </div>\n"
        "    </div>\n"
        f'    <a href="{escape_html(url)}" target="_blank" rel="noopener noreferrer" '
        'class="inline-flex items-center gap-2 text-primary hover:text-primary/80 font-medium transition-colors break-all">\n'
        f"      {link_text}\n"
        f'      <svg class="w-4 h-4 flex-shrink-0" fill="none" stroke="currentColor" viewBox="0 0 24 24">{EXTERNAL_ICON_PATH}</svg>\n'
        "    </a>\n"
        "  </div>\n"
        "</div>"
    )


def create_error_embed(error: str, url: str, classes: str) -> str:
    return (
        f'<div class="{classes}">\n'
        '  <div class="p-4 text-destructive">\n'
        '    <div class="font-medium flex items-center gap-2">\n'
        f'      <svg class="w-5 h-5" fill="none" stroke="currentColor" viewBox="0 0 24 24">{ERROR_ICON_PATH}</svg>\n'
        f"      {escape_html(error)}\n"
        "    </div>\n"
        f'    <div class="text-sm text-muted-foreground mt-1 break-all">{escape_html(url)}</div>\n'
        "  </div>\n"
        "</div>"
    )


def render_youtube(url, options, classes):
    video_id = extract_youtube_id(url)
    if not video_id:
        return create_error_embed("Invalid YouTube URL", url, classes)

    params = {}
    if options.get("autoplay") == "1":
        params["autoplay"] = "1"
    if options.get("mute") == "1":
        params["mute"] = "1"
    if options.get("loop") == "1":
        params["loop"] = "1"
        # Looping a single video needs the video as its own playlist
        params["playlist"] = video_id
    if options.get("controls") == "0":
        params["controls"] = "0"
    if options.get("start"):
        params["start"] = options["start"]
    params["rel"] = "0"
    params["modestbranding"] = "1"

    embed_url = f"https://www.youtube.com/embed/{quote(video_id)}?{urlencode(params)}"

    return _iframe_card(
        f'  <div style="{RESPONSIVE_WRAPPER_STYLE}">\n'
        f'    <iframe style="{RESPONSIVE_IFRAME_STYLE}" src="{escape_html(embed_url)}" '
        'title="YouTube video player" frameborder="0" '
        'allow="accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; picture-in-picture; web-share" '
        "allowfullscreen></iframe>\n"
        "  </div>",
        classes,
    )


def render_vimeo(url, options, classes):
    video_id = extract_vimeo_id(url)
    if not video_id:
        return create_error_embed("Invalid Vimeo URL", url, classes)

    params = {}
    if options.get("autoplay") == "1":
        params["autoplay"] = "1"
    if options.get("mute") == "1":
        params["muted"] = "1"
    if options.get("loop") == "1":
        params["loop"] = "1"

    embed_url = f"https://player.vimeo.com/video/{video_id}?{urlencode(params)}"

    return _iframe_card(
        f'  <div style="{RESPONSIVE_WRAPPER_STYLE}">\n'
        f'    <iframe style="{RESPONSIVE_IFRAME_STYLE}" src="{escape_html(embed_url)}" '
        'title="Vimeo video player" frameborder="0" allow="autoplay; fullscreen; picture-in-picture" '
        "allowfullscreen></iframe>\n"
        "  </div>",
        classes,
    )


def render_codepen(url, options, classes):
    ids = extract_codepen_ids(url)
    if not ids:
        logger.warning(f"Failed to parse CodePen URL: {url}")
        return create_error_embed("Invalid CodePen URL - Could not extract user and pen ID", url, classes)

    user, pen_id = ids
    height = options.get("height", "400")
    theme = "light" if options.get("theme") == "light" else "dark"
    params = {
        "default-tab": options.get("tab", "result"),
        "theme-id": theme,
        "editable": "true",
    }
    embed_url = f"https://codepen.io/{quote(user)}/embed/{quote(pen_id)}?{urlencode(params)}"

    return _iframe_card(
        f'  <iframe height="{escape_html(height)}" style="width: 100%; border: 0;" scrolling="no" '
        f'title="CodePen Embed - {escape_html(pen_id)}" src="{escape_html(embed_url)}" frameborder="0" '
        'loading="lazy" allowtransparency="true" allowfullscreen="true" '
        'allow="accelerometer; camera; encrypted-media; geolocation; gyroscope; microphone; midi; payment; vr; xr-spatial-tracking"></iframe>',
        classes,
    )


def render_codesandbox(url, options, classes):
    embed_url = url.replace("/s/", "/embed/", 1) if "/s/" in url else url
    if "?" not in embed_url:
        embed_url += f"?view={quote(options.get('view', 'preview'))}"
    height = options.get("height", "500")

    return _iframe_card(
        f'  <iframe src="{escape_html(embed_url)}" '
        f'style="width: 100%; height: {escape_html(height)}px; border: 0; border-radius: 4px; overflow: hidden;" '
        'title="CodeSandbox Embed" '
        'allow="accelerometer; ambient-light-sensor; camera; encrypted-media; geolocation; gyroscope; hid; microphone; midi; payment; usb; vr; xr-spatial-tracking" '
        'sandbox="allow-forms allow-modals allow-popups allow-presentation allow-same-origin allow-scripts"></iframe>',
        classes,
    )


def render_figma(url, options, classes):
    embed_url = f"https://www.figma.com/embed?embed_host=share&url={quote(url, safe='')}"
    height = options.get("height", "450")

    return _iframe_card(
        f'  <iframe style="border: none;" width="100%" height="{escape_html(height)}" '
        f'src="{escape_html(embed_url)}" allowfullscreen></iframe>',
        classes,
    )


def render_spotify(url, options, classes):
    embed_url = url.replace("open.spotify.com", "open.spotify.com/embed", 1)
    height = options.get("height", "380")

    return _iframe_card(
        f'  <iframe style="border-radius: 12px;" src="{escape_html(embed_url)}" width="100%" '
        f'height="{escape_html(height)}" frameborder="0" allowfullscreen="" '
        'allow="autoplay; clipboard-write; encrypted-media; fullscreen; picture-in-picture" loading="lazy"></iframe>',
        classes,
    )


def render_twitter(url, options, classes):
    icon = f'<svg class="w-6 h-6 fill-current text-blue-500" viewBox="0 0 24 24">{TWITTER_ICON_PATH}</svg>'
    return _link_card(icon, "Twitter Post", "External Link", url, "View on Twitter", classes)


def render_github(url, options, classes):
    parts = url.replace("https://github.com/", "").split("/")
    owner = parts[0]
    repo = parts[1] if len(parts) > 1 else ""

    if not owner or not repo:
        return create_error_embed("Invalid GitHub URL", url, classes)

    icon = f'<svg class="w-6 h-6 fill-current" viewBox="0 0 24 24">{GITHUB_ICON_PATH}</svg>'
    title = f"{escape_html(owner)}/{escape_html(repo)}"
    return _link_card(icon, title, "GitHub Repository", url, "View on GitHub", classes)


def render_generic(url, options, classes):
    icon = (
        '<div class="w-10 h-10 rounded-lg bg-muted flex items-center justify-center">'
        f'<svg class="w-5 h-5 text-muted-foreground" fill="none" stroke="currentColor" viewBox="0 0 24 24">{LINK_ICON_PATH}</svg>'
        "</div>"
    )
    domain = escape_html(extract_domain(url))
    return _link_card(icon, "External Link", domain, url, escape_html(url), classes)


PROVIDERS = {
    "youtube": render_youtube,
    "vimeo": render_vimeo,
    "codepen": render_codepen,
    "codesandbox": render_codesandbox,
    "figma": render_figma,
    "spotify": render_spotify,
    "twitter": render_twitter,
    "tweet": render_twitter,
    "github": render_github,
}


def render_embed_html(provider: str, url: str, options: str) -> str:
    """Dispatch to the provider renderer; unknown providers get a link card."""
    renderer = PROVIDERS.get(provider.lower(), render_generic)
    return renderer(url, parse_options(options), CARD_CLASSES)


def parse_embed(match):
    return Token(
        type="embed",
        content=match.group(2),
        raw=match.group(0),
        attributes={
            "provider": match.group(1),
            "url": match.group(2),
            "options": match.group(3) or "",
        },
    )


def render_embed(token: Token) -> str:
    provider = token.attributes.get("provider") or "generic"
    url = token.attributes.get("url") or ""
    return render_embed_html(provider, url, token.attributes.get("options") or "")


EmbedExtension = Extension(
    name="embed",
    parse_rules=[ParseRule("embed", EMBED_PATTERN, parse_embed)],
    render_rules=[RenderRule("embed", render_embed)],
)
