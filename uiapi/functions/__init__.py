"""Function store: script files whose named functions are inlined into
component `functions` blocks.
"""
