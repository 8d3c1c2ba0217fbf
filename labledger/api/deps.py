from __future__ import annotations

from functools import lru_cache

from labledger.core.config import Settings
from labledger.core.modes.registry import ModeRegistry
from labledger.core.store import build_store
from labledger.core.store.base import TableStore
from labledger.core.submission.orchestrator import SubmissionService


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=1)
def get_store() -> TableStore:
    # One store per process: the memory store keeps its rows, the sheets store its token
    return build_store(get_settings())


@lru_cache(maxsize=1)
def get_modes() -> ModeRegistry:
    return ModeRegistry(overrides_path=get_settings().modes_file)


def get_submission_service() -> SubmissionService:
    return SubmissionService(get_store(), modes=get_modes(), settings=get_settings())


def reset_dependencies() -> None:
    """Test helper: drop cached settings/store so env changes take effect."""
    get_settings.cache_clear()
    get_store.cache_clear()
    get_modes.cache_clear()
