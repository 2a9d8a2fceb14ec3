"""
Generate-or-reuse protocol for the workspace identity.

    NoIdentity --generate--> Generated --save--> Persisted

A record already in the store jumps straight to Persisted without
touching the generator, so repeated runs return the same identity.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ..contracts.identity_record import IdentityRecord
from ..memory.store import IdentityStore
from ..utils.time_utils import format_generated_time
from .generator import IdentityGenerator

logger = logging.getLogger(__name__)


class ProvisionOutcome(str, Enum):
    REUSED = "REUSED"
    GENERATED = "GENERATED"


@dataclass(frozen=True)
class ProvisionResult:
    record: IdentityRecord
    outcome: ProvisionOutcome

    @property
    def identity(self) -> str:
        return self.record.identity

    @property
    def generated(self) -> bool:
        return self.outcome is ProvisionOutcome.GENERATED


def _generate_and_persist(
    store: IdentityStore, generator: IdentityGenerator, now: Optional[datetime]
) -> ProvisionResult:
    record = IdentityRecord(identity=generator.generate(), created_at=format_generated_time(now))
    store.save(record)
    logger.info("Generated new random package: %s", record.identity)
    return ProvisionResult(record=record, outcome=ProvisionOutcome.GENERATED)


def provision_identity(
    store: IdentityStore, generator: IdentityGenerator, now: Optional[datetime] = None
) -> ProvisionResult:
    """Return the persisted identity, creating one first if the store is empty."""
    existing = store.load()
    if existing is not None:
        logger.info("Using existing package: %s", existing.identity)
        return ProvisionResult(record=existing, outcome=ProvisionOutcome.REUSED)
    return _generate_and_persist(store, generator, now)


def regenerate_identity(
    store: IdentityStore, generator: IdentityGenerator, now: Optional[datetime] = None
) -> ProvisionResult:
    """Drop the stored identity and provision a fresh one."""
    store.clear()
    return _generate_and_persist(store, generator, now)
