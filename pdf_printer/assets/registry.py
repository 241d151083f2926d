"""Embed static assets (fonts, images) into HTML as base64 data URIs."""

import base64
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import aiofiles
import structlog

from ..constants import ASSET_MIME_TYPES, ASSET_SKIP_PREFIXES, DEFAULT_ASSET_MIME_TYPE

logger = structlog.get_logger(__name__)

CSS_URL_PATTERN = re.compile(r"url\((['\"]?)([^'\")]+)\1\)", re.IGNORECASE)
SRC_PATTERN = re.compile(r"src\s*=\s*(['\"])([^'\"]+)\1", re.IGNORECASE)
HREF_PATTERN = re.compile(r"href\s*=\s*(['\"])([^'\"]+)\1", re.IGNORECASE)


@dataclass(frozen=True)
class AssetEntry:
    """A single embedded asset."""

    data_uri: str
    mtime: float
    size_bytes: int


@dataclass
class AssetCache:
    """Per-directory cache of scanned assets.

    Owned by the caller and passed to ``AssetRegistryBuilder``; nothing is
    cached at module level.
    """

    _entries: dict[Path, dict[str, AssetEntry]] = field(default_factory=dict)

    def get(self, directory: Path) -> Optional[dict[str, AssetEntry]]:
        return self._entries.get(directory)

    def set(self, directory: Path, assets: dict[str, AssetEntry]) -> None:
        self._entries[directory] = assets

    def invalidate(self, directory: Union[str, Path]) -> bool:
        """Drop one directory; True if it was cached."""
        return self._entries.pop(Path(directory).resolve(), None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def guess_mime_type(path: Union[str, Path]) -> str:
    return ASSET_MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_ASSET_MIME_TYPE)


async def load_asset(path: Path) -> AssetEntry:
    """Read a file into a data URI entry."""
    async with aiofiles.open(path, "rb") as f:
        content = await f.read()

    encoded = base64.b64encode(content).decode("ascii")
    return AssetEntry(
        data_uri=f"data:{guess_mime_type(path)};base64,{encoded}",
        mtime=path.stat().st_mtime,
        size_bytes=len(content),
    )


class AssetRegistryBuilder:
    """Builds URL to data URI maps from static directories."""

    def __init__(self, cache: Optional[AssetCache] = None):
        self.cache = cache if cache is not None else AssetCache()

    async def build(
        self,
        static_dir: Union[str, Path],
        fallback_static_dir: Optional[Union[str, Path]] = None,
    ) -> dict[str, str]:
        """Map asset URLs to data URIs; ``static_dir`` wins over the fallback."""
        registry = {url: entry.data_uri for url, entry in (await self._scan(static_dir)).items()}

        if fallback_static_dir is not None:
            for url, entry in (await self._scan(fallback_static_dir)).items():
                registry.setdefault(url, entry.data_uri)

        return registry

    async def _scan(self, directory: Union[str, Path]) -> dict[str, AssetEntry]:
        root = Path(directory).resolve()
        cached = self.cache.get(root)
        if cached is not None:
            return cached

        assets: dict[str, AssetEntry] = {}
        if root.is_dir():
            for path in sorted(p for p in root.rglob("*") if p.is_file()):
                entry = await load_asset(path)
                relative = path.relative_to(root).as_posix()
                assets[f"/{relative}"] = entry
                assets[relative] = entry
            logger.debug("Scanned asset directory", directory=str(root), files=len(assets) // 2)
        else:
            logger.warning("Asset directory does not exist", directory=str(root))

        self.cache.set(root, assets)
        return assets


def _lookup(registry: dict[str, str], url: str) -> Optional[str]:
    return registry.get(url) or registry.get(f"/{url}") or registry.get(url[1:])


def embed_assets_in_html(html: str, registry: dict[str, str]) -> str:
    """Replace url(), src and href references found in ``registry`` with data URIs."""
    if not registry:
        return html

    def replace_css(match: re.Match) -> str:
        quote, url = match.group(1), match.group(2)
        if url.startswith(ASSET_SKIP_PREFIXES):
            return match.group(0)
        data_uri = _lookup(registry, url)
        return f"url({quote}{data_uri}{quote})" if data_uri else match.group(0)

    def replace_attr(name: str):
        def replace(match: re.Match) -> str:
            quote, url = match.group(1), match.group(2)
            if url.startswith(ASSET_SKIP_PREFIXES):
                return match.group(0)
            data_uri = _lookup(registry, url)
            return f"{name}={quote}{data_uri}{quote}" if data_uri else match.group(0)

        return replace

    html = CSS_URL_PATTERN.sub(replace_css, html)
    html = SRC_PATTERN.sub(replace_attr("src"), html)
    return HREF_PATTERN.sub(replace_attr("href"), html)
