"""Finder benchmarks, run with pytest-benchmark::

    pytest tests/benchmarks/ -v --benchmark-sort=median

Add ``--benchmark-disable`` to run them as plain functional tests.
"""
