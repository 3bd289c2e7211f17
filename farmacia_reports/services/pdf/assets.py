"""Best-effort loading of decorative image assets (logo, illustrations)."""
from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Iterable

from PIL import Image

from farmacia_reports.core.errors import AssetError
from .surface import DrawingSurface, LayoutBox

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageAsset:
    reference: str
    path: Path
    width_px: int
    height_px: int

    @property
    def aspect_ratio(self) -> float:
        """Height over width."""
        return self.height_px / self.width_px


@dataclass(frozen=True)
class AssetOutcome:
    """Result of an asset draw step: the box drawn, or the error met."""

    box: LayoutBox | None = None
    error: AssetError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AssetProvider:
    """Resolve image references against a list of asset directories."""

    def __init__(self, search_dirs: Iterable[Path] = ()) -> None:
        self._search_dirs = [Path(directory) for directory in search_dirs]
        self._cache: dict[str, ImageAsset] = {}

    def _resolve_path(self, reference: str) -> Path:
        candidate = Path(reference).expanduser()
        if candidate.is_absolute() or candidate.exists():
            return candidate
        for directory in self._search_dirs:
            located = directory / reference
            if located.exists():
                return located
        return candidate

    def load(self, reference: str) -> ImageAsset:
        cached = self._cache.get(reference)
        if cached is not None:
            return cached
        path = self._resolve_path(reference)
        if not path.exists():
            raise AssetError(reference, "archivo no encontrado")
        try:
            with Image.open(path) as img:
                width_px, height_px = img.size
                img.verify()
        except (OSError, SyntaxError, ValueError) as exc:
            raise AssetError(reference, f"imagen ilegible ({exc})") from exc
        if width_px <= 0 or height_px <= 0:
            raise AssetError(reference, "dimensiones inválidas")
        asset = ImageAsset(reference=reference, path=path, width_px=width_px, height_px=height_px)
        self._cache[reference] = asset
        return asset


def draw_image_asset(
    surface: DrawingSurface,
    provider: AssetProvider,
    reference: str,
    x: float,
    y: float,
    *,
    max_width: float,
    max_height: float,
) -> AssetOutcome:
    """Draw an image scaled to fit ``max_width`` x ``max_height``.

    Failures are returned, never raised: the caller logs them and keeps
    drawing the rest of the page.
    """
    try:
        asset = provider.load(reference)
    except AssetError as exc:
        logger.warning("[report_assets] %s", exc)
        return AssetOutcome(error=exc)
    width = max_width
    height = width * asset.aspect_ratio
    if height > max_height:
        height = max_height
        width = height / asset.aspect_ratio
    surface.image(str(asset.path), x, y, width, height)
    return AssetOutcome(box=LayoutBox(x, y, width, height))
