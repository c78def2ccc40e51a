"""cvtrail — resume analysis and generation with versioned analysis history."""

__version__ = "1.0.0"
