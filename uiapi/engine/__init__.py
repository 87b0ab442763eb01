"""Assembly engine: directive resolution, override merging, header ordering,
function inlining and the orchestrating Assembler.

Everything here is a pure computation over in-memory data; file reads happen
in the registries and the function store before the merge pipeline runs.
"""
