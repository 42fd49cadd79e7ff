"""strainscore: strain, recovery, stress and readiness scoring for wearables."""

__version__ = "0.1.0"
