"""Component templates: one directive map per UI component kind.

Templates decide which payload sections get built from the model schema,
which are omitted, and which are passed through as literal defaults.
"""
