"""codefixer: review source files with a local LLM and apply its corrections."""

__version__ = "1.0.0"
