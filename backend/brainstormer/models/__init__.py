from .chat_session import ChatSession, GUID

__all__ = ["ChatSession", "GUID"]
