"""AI-assisted job search: provider fan-out, fallbacks, merging and ranking."""
from jobassist.pipeline import JobAssistant

__all__ = ["JobAssistant"]
__version__ = "0.1.0"
