"""Network-Tools: diagnostics, port scanning, site monitoring, throughput tests."""
