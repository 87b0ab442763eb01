"""UI API - View Config Assembly Service.

Turns declarative view configs plus model schemas into assembled UI payloads:
- Component templates (table, form, toolbar, filterSection, meta)
- Model schemas (column definitions per model)
- View configs (per-model view blocks with overrides and customizations)
"""

__version__ = "0.1.0"
