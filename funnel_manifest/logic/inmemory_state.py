"""In-memory funnel store for tests and local development.

Implements the ``FunnelRepository`` contract over plain dictionaries and
records every read in ``calls`` so tests can assert exactly which
collaborators a resolution touched. It also keeps the retired per-funnel
version pins that older data sets still carry; the resolver must never
consult them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from funnel_manifest.models.funnel_version import (
    FunnelCatalogEntry,
    FunnelVersionRow,
    PatientVersionOverride,
)


class InMemoryFunnelRepository:
    def __init__(self) -> None:
        # slug -> catalog entry
        self.funnels: Dict[str, FunnelCatalogEntry] = {}
        # version_id -> version row
        self.versions: Dict[str, FunnelVersionRow] = {}
        # user_id -> patient profile id
        self.patient_profiles: Dict[str, str] = {}
        # (patient_id, funnel_id) -> override
        self.overrides: Dict[Tuple[str, str], PatientVersionOverride] = {}
        # funnel_id -> pinned version id (retired indirection)
        self.legacy_version_pins: Dict[str, str] = {}
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    # Seeding helpers

    def add_funnel(
        self,
        funnel_id: str,
        slug: str,
        *,
        default_version_id: Optional[str] = None,
        title: str = "",
        is_active: bool = True,
    ) -> FunnelCatalogEntry:
        entry = FunnelCatalogEntry(
            id=funnel_id,
            slug=slug,
            title=title,
            is_active=is_active,
            default_version_id=default_version_id,
        )
        self.funnels[slug] = entry
        return entry

    def add_version(self, row: FunnelVersionRow) -> FunnelVersionRow:
        self.versions[row.id] = row
        return row

    def add_patient(self, user_id: str, patient_id: str) -> None:
        self.patient_profiles[user_id] = patient_id

    def set_override(self, patient_id: str, funnel_id: str, active_version_id: Optional[str]) -> None:
        self.overrides[(patient_id, funnel_id)] = PatientVersionOverride(
            patient_id=patient_id,
            funnel_id=funnel_id,
            active_version_id=active_version_id,
        )

    def pin_legacy_version(self, funnel_id: str, version_id: str) -> None:
        self.legacy_version_pins[funnel_id] = version_id

    def called(self, method: str) -> bool:
        return any(name == method for name, _ in self.calls)

    # FunnelRepository

    def get_funnel_by_slug(self, slug: str) -> Optional[FunnelCatalogEntry]:
        self.calls.append(("get_funnel_by_slug", (slug,)))
        return self.funnels.get(slug)

    def get_patient_profile_id(self, user_id: str) -> Optional[str]:
        self.calls.append(("get_patient_profile_id", (user_id,)))
        return self.patient_profiles.get(user_id)

    def get_active_version_override(self, patient_id: str, funnel_id: str) -> Optional[PatientVersionOverride]:
        self.calls.append(("get_active_version_override", (patient_id, funnel_id)))
        return self.overrides.get((patient_id, funnel_id))

    def get_funnel_version_by_id(self, version_id: str) -> Optional[FunnelVersionRow]:
        self.calls.append(("get_funnel_version_by_id", (version_id,)))
        return self.versions.get(version_id)

    def get_legacy_version_pin(self, funnel_id: str) -> Optional[str]:
        self.calls.append(("get_legacy_version_pin", (funnel_id,)))
        return self.legacy_version_pins.get(funnel_id)


__all__ = ["InMemoryFunnelRepository"]
