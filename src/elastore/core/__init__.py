"""Pure query translation and result hydration."""

from elastore.core.hydration import hydrate_hit, hydrate_list
from elastore.core.query import build_find
from elastore.core.sort import build_sort

__all__ = ["build_find", "build_sort", "hydrate_hit", "hydrate_list"]
