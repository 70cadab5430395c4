"""Shared fixtures."""

from __future__ import annotations

import pytest

from commit_digest.domain.value_objects import RepoRef
from commit_digest.services.progress import ProgressRegistry


@pytest.fixture
def repo() -> RepoRef:
    return RepoRef(owner="octo", name="demo")


@pytest.fixture
def registry() -> ProgressRegistry:
    return ProgressRegistry()
