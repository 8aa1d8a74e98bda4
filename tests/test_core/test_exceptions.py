"""
Tests for artifactory_artifacts.core.exceptions
=================================================

Every exception carries a message, an error code, a details dict, and (for
store errors) the remote key plus an ErrorKind.
"""

from artifactory_artifacts.core.enums import ErrorKind
from artifactory_artifacts.core.exceptions import (
    ArtifactsError,
    AuthFailureError,
    ConfigurationError,
    NetworkError,
    ObjectNotFoundError,
    PartialArchiveError,
    RemoteRejectedError,
    StashNotFoundError,
    StashSourceError,
    StoreError,
)
from artifactory_artifacts.core.models import ArchiveFailure, Manifest, ManifestEntry


class TestArtifactsError:
    def test_defaults(self) -> None:
        error = ArtifactsError("boom")
        assert error.message == "boom"
        assert error.error_code == "UNKNOWN_ERROR"
        assert error.details == {}
        assert str(error) == "boom"

    def test_to_dict(self) -> None:
        error = ConfigurationError("bad", details={"field": "x"})
        assert error.to_dict() == {
            "error_type": "ConfigurationError",
            "message": "bad",
            "error_code": "CONFIG_ERROR",
            "details": {"field": "x"},
        }

    def test_repr(self) -> None:
        assert "error_code='CONFIG_ERROR'" in repr(ConfigurationError("bad"))


# =============================================================================
# Test: Store Errors
# =============================================================================
class TestStoreErrors:
    """Store errors are scoped to one key and classified by kind."""

    def test_key_is_added_to_details(self) -> None:
        error = NetworkError("timeout", key="a/b.txt", details={"attempts": 3})
        assert error.key == "a/b.txt"
        assert error.details == {"attempts": 3, "key": "a/b.txt"}

    def test_kinds_and_codes(self) -> None:
        cases = [
            (NetworkError, ErrorKind.NETWORK, "NETWORK_ERROR"),
            (AuthFailureError, ErrorKind.AUTH_FAILURE, "AUTH_FAILURE"),
            (RemoteRejectedError, ErrorKind.REMOTE_REJECTED, "REMOTE_REJECTED"),
            (ObjectNotFoundError, ErrorKind.NOT_FOUND, "NOT_FOUND"),
        ]
        for cls, kind, code in cases:
            error = cls("msg", key="k")
            assert isinstance(error, StoreError)
            assert isinstance(error, ArtifactsError)
            assert error.kind is kind
            assert error.error_code == code

    def test_configuration_error_kind(self) -> None:
        assert ConfigurationError.kind is ErrorKind.CONFIGURATION

    def test_stash_not_found(self) -> None:
        error = StashNotFoundError(
            stash_name="sources",
            key="jenkins/job/2/artifacts/stash/sources.bundle",
            job_full_name="job",
            build_number=2,
        )

        assert isinstance(error, ObjectNotFoundError)
        assert error.kind is ErrorKind.NOT_FOUND
        assert error.error_code == "STASH_NOT_FOUND"
        assert error.message == "No stash named 'sources' found for job #2"
        assert error.details["stash_name"] == "sources"
        assert error.details["build_number"] == 2

    def test_stash_source_error(self) -> None:
        error = StashSourceError(stash_name="sources", source="/ws/a.txt", reason="No such file or directory")

        assert not isinstance(error, StoreError)
        assert error.kind is ErrorKind.LOCAL_IO
        assert error.error_code == "STASH_SOURCE_UNREADABLE"
        assert "sources" in error.message
        assert error.details == {"stash_name": "sources", "source": "/ws/a.txt"}


# =============================================================================
# Test: PartialArchiveError
# =============================================================================
class TestPartialArchiveError:
    def test_summarizes_failures(self, build) -> None:
        manifest = Manifest(build=build)
        manifest.add(ManifestEntry(relative_path="ok.txt", key="k", url="u"))
        failures = [
            ArchiveFailure(relative_path="bad.txt", error_kind=ErrorKind.NETWORK, message="x"),
        ]

        error = PartialArchiveError(failures=failures, manifest=manifest)

        assert error.error_code == "PARTIAL_ARCHIVE"
        assert error.failures == failures
        assert error.manifest is manifest
        assert error.details == {"failed": ["bad.txt"], "archived": 1}
        assert "bad.txt (network)" in error.message
        assert "testPipelineWithPrefix #1" in error.message
