"""taskflow: file-based workflow tracker for AI-assisted development."""

__version__ = "0.1.0"
