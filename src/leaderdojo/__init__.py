"""LeaderDojo: AI orchestration and heuristics for a leadership journal."""

__version__ = "0.1.0"
