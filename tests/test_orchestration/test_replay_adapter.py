"""
Tests for artifactory_artifacts.orchestration.replay
======================================================

Scenario:
    Build #1 stashes "sources". The pipeline is replayed as build #2.
    Unstashing "sources" in #2 only finds build #1's bundle when reuse of
    the original stash is requested explicitly.
"""

import pytest
from pydantic import ValidationError

from artifactory_artifacts.core.exceptions import StashNotFoundError
from artifactory_artifacts.core.models import BuildIdentity
from artifactory_artifacts.infrastructure.object_store import read_bytes
from artifactory_artifacts.orchestration.replay import ReplayAdapter, ReplayContext


@pytest.fixture
def original():
    return BuildIdentity(job_full_name="test Pipeline With spaces", build_number=1)


@pytest.fixture
async def stashed_original(stash_coordinator, original, make_workspace):
    """Build #1 has stashed 'sources' from its agent workspace."""
    agent = make_workspace("agent", {"src/main.c": "original source"})
    await stash_coordinator.stash(original, "sources", agent.collect())
    return original


# =============================================================================
# Test: ReplayContext
# =============================================================================
class TestReplayContext:
    def test_new_build_context(self, replay_adapter, original) -> None:
        context = replay_adapter.new_build_context(original, 2)

        assert context.original == original
        assert context.replayed == BuildIdentity(job_full_name=original.job_full_name, build_number=2)

    def test_same_build_number_rejected(self, replay_adapter, original) -> None:
        with pytest.raises(ValidationError):
            replay_adapter.new_build_context(original, 1)

    def test_different_job_rejected(self, original) -> None:
        with pytest.raises(ValidationError):
            ReplayContext(original=original, replayed=BuildIdentity(job_full_name="other", build_number=2))

    def test_build_for_stash(self, replay_adapter, original) -> None:
        context = replay_adapter.new_build_context(original, 2)
        assert ReplayAdapter.build_for_stash(context) == context.replayed
        assert ReplayAdapter.build_for_stash(context, reuse_original=True) == original


# =============================================================================
# Test: Unstash Under Replay
# =============================================================================
class TestReplayUnstash:
    async def test_reuse_original_stash(self, replay_adapter, stashed_original, make_workspace) -> None:
        context = replay_adapter.new_build_context(stashed_original, 2)
        controller = make_workspace("controller")

        restored = await replay_adapter.unstash(context, "sources", controller, reuse_original=True)

        assert restored == ["src/main.c"]
        assert (controller.root / "src" / "main.c").read_text() == "original source"

    async def test_without_reuse_stash_is_missing(self, replay_adapter, stashed_original, make_workspace) -> None:
        context = replay_adapter.new_build_context(stashed_original, 2)

        with pytest.raises(StashNotFoundError) as exc_info:
            await replay_adapter.unstash(context, "sources", make_workspace("controller"))

        assert exc_info.value.build_number == 2

    async def test_new_stash_goes_to_replayed_build(self, replay_adapter, stash_coordinator, stashed_original, make_workspace) -> None:
        context = replay_adapter.new_build_context(stashed_original, 2)
        agent = make_workspace("replay-agent", {"src/main.c": "replayed source"})
        controller = make_workspace("controller")

        ref = await replay_adapter.stash(context, "sources", agent.collect())
        await replay_adapter.unstash(context, "sources", controller)

        assert ref.owning_build == context.replayed
        assert (controller.root / "src" / "main.c").read_text() == "replayed source"
        assert await stash_coordinator.list_stashes(stashed_original) == ["sources"]


# =============================================================================
# Test: Archive Under Replay
# =============================================================================
class TestReplayArchive:
    async def test_archive_never_touches_original(self, replay_adapter, archive_coordinator, store, original, source_file) -> None:
        original_manifest = await archive_coordinator.archive(original, {"a.txt": source_file("v1.txt", "one")})
        context = replay_adapter.new_build_context(original, 2)

        manifest = await replay_adapter.archive(context, {"a.txt": source_file("v2.txt", "two")})

        assert manifest.build == context.replayed
        assert manifest.get("a.txt").key == "jenkins/test%20Pipeline%20With%20spaces/2/artifacts/a.txt"
        assert await read_bytes(store, original_manifest.get("a.txt").key) == b"one"
        assert await read_bytes(store, manifest.get("a.txt").key) == b"two"
