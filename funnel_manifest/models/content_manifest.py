"""Typed content manifest (editorial pages, sections and assets)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import StrictStr

from funnel_manifest.models.questionnaire import Number, ArtifactModel
from funnel_manifest.models.registry import SCHEMA_VERSION_V1, AssetType, SectionType


class Section(ArtifactModel):
    key: StrictStr
    type: SectionType
    content_ref: Optional[StrictStr] = None
    content: Optional[Dict[str, Any]] = None
    order_index: Optional[Number] = None


class Page(ArtifactModel):
    slug: StrictStr
    title: StrictStr
    description: Optional[StrictStr] = None
    sections: List[Section]
    metadata: Optional[Dict[str, Any]] = None

    def ordered_sections(self) -> List[Section]:
        """Return sections in render order.

        Sections carrying ``order_index`` come first, ascending; the rest
        follow in declaration order. The sort is stable, so ties keep
        their declared order.
        """
        return sorted(
            self.sections,
            key=lambda s: (s.order_index is None, s.order_index if s.order_index is not None else 0),
        )


class Asset(ArtifactModel):
    key: StrictStr
    type: AssetType
    url: StrictStr
    metadata: Optional[Dict[str, Any]] = None


class ContentManifest(ArtifactModel):
    schema_version: StrictStr = SCHEMA_VERSION_V1
    version: StrictStr = "1.0"
    pages: List[Page]
    assets: Optional[List[Asset]] = None
    metadata: Optional[Dict[str, Any]] = None

    def get_page(self, slug: str) -> Optional[Page]:
        for page in self.pages:
            if page.slug == slug:
                return page
        return None


__all__ = ["Section", "Page", "Asset", "ContentManifest"]
