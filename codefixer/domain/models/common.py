"""Defines common Value Objects used across the application.

These objects represent simple values like file paths, prompts and file
content, giving the service signatures a little more meaning than `str`.
"""

from typing import NewType

# Using NewType for semantic clarity, although they are strings at runtime.
FilePath = NewType("FilePath", str)           # Path to a file or directory
FileContent = NewType("FileContent", str)     # Full (or truncated) content of a file
PromptText = NewType("PromptText", str)       # Prompt sent to the inference endpoint
ModelName = NewType("ModelName", str)         # Model identifier, e.g. "codellama"
FileExtension = NewType("FileExtension", str)  # Extension including the dot, e.g. ".cs"
