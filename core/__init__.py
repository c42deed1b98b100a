"""Core (UI-agnostic) school reports logic.

This package contains:
- configuration and logging setup
- the report registry (titles, fetchers, filter settings)
- record loading (JSON files or HTTP -> pandas)
- table state normalization and transitions
- the filter/sort/paginate table engine
- the report view controller
"""

