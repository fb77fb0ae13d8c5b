"""Weight loss challenge: weekly weigh-ins, statistics and leaderboards."""

__version__ = "1.0.0"
