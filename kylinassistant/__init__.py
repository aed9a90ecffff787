"""Role-based AI chat assistant core: roles, chat sessions, chat view state and page control."""

__version__ = "1.0.0"
__all__ = ["roles", "chatcore", "chatview", "assistant"]