"""Single-page sources for incremental dataset builders."""

from feed.dataset.sources import DatasetSource

__all__ = ["DatasetSource"]
