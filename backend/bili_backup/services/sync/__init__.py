"""
Sync Module

- orchestrator: backup / restore / clear over domain adapters
- outcome: per-run result accumulation
"""
from .orchestrator import (
    ContainerAdapter,
    ContainerSpec,
    DomainAdapter,
    GroupTag,
    RestoreOptions,
    SyncOrchestrator,
    split_by_capacity,
)
from .outcome import BatchOutcome, RestoreState

__all__ = [
    'ContainerAdapter',
    'ContainerSpec',
    'DomainAdapter',
    'GroupTag',
    'RestoreOptions',
    'SyncOrchestrator',
    'split_by_capacity',
    'BatchOutcome',
    'RestoreState',
]
