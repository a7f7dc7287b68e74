"""Benchmark tasks, results and dataset loading."""
