"""ORM micro-benchmarks: tracking modes, loading strategies, aggregation and batching."""

__version__ = "0.1.0"
