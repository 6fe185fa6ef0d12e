"""Shared fixtures for memtop tests."""

import pytest

from memtop.models import CategorizedProcess, ProcessEntry, RiskTier

MIB = 1024 * 1024
GIB = 1024 * MIB


@pytest.fixture
def make_process():
    """Factory for categorized processes with sensible defaults."""

    def _make(
        pid: int,
        name: str = "proc",
        mem: int = 0,
        tier: RiskTier = RiskTier.SAFE,
        path: str = "",
        owner_id: int = 501,
        description: str = "",
    ) -> CategorizedProcess:
        entry = ProcessEntry(
            pid=pid,
            name=name,
            path=path,
            resident_bytes=mem,
            owner_id=owner_id,
            bundle_description=description,
        )
        return CategorizedProcess(entry=entry, tier=tier)

    return _make
