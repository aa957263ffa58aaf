"""System-Utilities: health checks, disk usage, cleanup, benchmarks, inventory."""
