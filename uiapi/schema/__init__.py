"""Schema provider: per-model column definitions loaded from YAML.

The engine consumes a read-only snapshot: column token -> ColumnDefinition,
including flattened relation tokens ('country.name_eng').
"""
