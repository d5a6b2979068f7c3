# changelog/markdown/extensions/__init__.py

from .alert import AlertExtension
from .button import ButtonExtension
from .embed import EmbedExtension

# Registration order of the built-ins; pinned parse rules keep this order
BUILTIN_EXTENSIONS = [
    ButtonExtension,
    AlertExtension,
    EmbedExtension,
]

__all__ = ["AlertExtension", "BUILTIN_EXTENSIONS", "ButtonExtension", "EmbedExtension"]
