"""
artifactory_artifacts.orchestration - Coordination Layer
==========================================================

Coordinators that turn build steps into remote store operations:

    - ArchiveCoordinator: archive files, build the manifest, download/list
    - StashCoordinator:   stash/unstash named bundles across nodes
    - ReplayAdapter:      pick the build identity for replayed pipelines
"""

from artifactory_artifacts.orchestration.archive import ArchiveCoordinator
from artifactory_artifacts.orchestration.replay import ReplayAdapter, ReplayContext
from artifactory_artifacts.orchestration.stash import StashCoordinator

__all__ = [
    "ArchiveCoordinator",
    "ReplayAdapter",
    "ReplayContext",
    "StashCoordinator",
]
