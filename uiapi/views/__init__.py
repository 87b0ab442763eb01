"""View configs: per-model documents of named view blocks.

A view block is what a request selects: which components to assemble, with
which overrides, columns, customizations, page size and languages.
"""
