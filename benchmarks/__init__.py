"""
Benchmark suite for sonj parsing performance.

Compares sonj against standard JSON libraries including:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Run with pytest-benchmark: ``pytest benchmarks``.
"""
