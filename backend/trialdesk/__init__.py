"""TrialDesk: trial booking, teacher assignment and lifecycle tracking."""

__version__ = "0.1.0"
