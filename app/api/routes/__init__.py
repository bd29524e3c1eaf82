from . import copilot

__all__ = ["copilot"]
