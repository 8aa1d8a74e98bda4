"""
artifactory-artifacts Test Suite
==================================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/           → Tests for artifactory_artifacts.core (config, models, exceptions)
    ├── test_infrastructure/ → Tests for path resolution, stores, retry, bundles
    ├── test_orchestration/  → Tests for archive, stash and replay coordination
    ├── test_facade.py       → End-to-end flows through ArtifactManager
    └── conftest.py          → Shared pytest fixtures

Running Tests:
    pytest                              # Run all tests
    pytest tests/test_infrastructure/   # Run only infrastructure tests
"""
