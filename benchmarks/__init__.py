"""
Benchmark suite for j5codec JSON5 parsing performance.

Compares j5codec against standard JSON libraries including:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Measures parsing speed and memory usage across different data types, and
compares the j5codec entry points on JSON5-only input.
"""
