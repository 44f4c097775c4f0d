"""Post an AI-generated code review as one continuously updated pull request comment."""

__version__ = "1.0.0"
