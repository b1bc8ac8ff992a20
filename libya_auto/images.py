"""Backend image paths to absolute URLs.

The backend hands out image paths in several shapes: full URLs, paths rooted
at the server, Windows-style paths that contain an ``uploads`` directory, or
bare file names relative to ``uploads``. ``ImageRef`` classifies a path once
so templates only have to ask for a URL.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from libya_auto import config

logger = logging.getLogger(__name__)

PLACEHOLDER = "placeholder"
ABSOLUTE = "absolute"
ROOTED = "rooted"
UPLOADS = "uploads"
RELATIVE = "relative"


@dataclass(frozen=True)
class ImageRef:
    kind: str
    path: str = ""

    @classmethod
    def parse(cls, path: Optional[str]) -> "ImageRef":
        if not path:
            return cls(PLACEHOLDER)
        if path.startswith("http://") or path.startswith("https://"):
            return cls(ABSOLUTE, path)
        if path.startswith("/"):
            return cls(ROOTED, path)
        normalized = path.replace("\\", "/")
        idx = normalized.find("uploads/")
        if idx != -1:
            return cls(UPLOADS, normalized[idx:])
        return cls(RELATIVE, normalized)

    def url(self, base_url: Optional[str] = None) -> str:
        base = (base_url or config.API_URL).rstrip("/")
        if self.kind == PLACEHOLDER:
            return config.PLACEHOLDER_IMAGE
        if self.kind == ABSOLUTE:
            return self.path
        if self.kind == ROOTED:
            return f"{base}{self.path}"
        if self.kind == UPLOADS:
            return f"{base}/{self.path}"
        return f"{base}/uploads/{self.path}"


def format_image_path(path: Optional[str], base_url: Optional[str] = None) -> str:
    ref = ImageRef.parse(path)
    result = ref.url(base_url)
    logger.debug("image %r (%s) -> %s", path, ref.kind, result)
    return result
