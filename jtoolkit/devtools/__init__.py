"""Development-Tools: git repository status, line counting, project scaffolding."""
