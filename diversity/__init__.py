"""Core (UI-agnostic) product diversity logic.

This package contains:
- data loading (pickle/CSV/XLSX -> pandas) and the dashboard snapshot
- grower normalization and per-category product counts
- selection normalization and the reactive selection state
- view compute functions (tidy frames + JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
