"""Static asset embedding for self-contained HTML."""

from .registry import (
    AssetCache,
    AssetEntry,
    AssetRegistryBuilder,
    embed_assets_in_html,
    guess_mime_type,
    load_asset,
)

__all__ = [
    "AssetCache",
    "AssetEntry",
    "AssetRegistryBuilder",
    "embed_assets_in_html",
    "guess_mime_type",
    "load_asset",
]
