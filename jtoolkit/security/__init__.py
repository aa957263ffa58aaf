"""Security-Tools: password generation and scoring, file integrity baselines."""
