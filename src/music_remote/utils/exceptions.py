"""
Custom exceptions for the music remote.

Defines the exceptions raised at the component boundaries so that
callers can convert them into user notifications.
"""

class MusicRemoteException(Exception):
    """
    Base exception for all music remote errors.

    Attributes:
        message (str): Detailed error message
        code (int): Optional error code
    """
    def __init__(self, message: str, code: int = None):
        self.message = message
        self.code = code
        super().__init__(self.message)

class ProtocolError(MusicRemoteException):
    """
    Raised when an inbound frame cannot be decoded.

    Examples:
        >>> raise ProtocolError("Inbound frame is not valid JSON")
    """
    pass

class ConnectionNotOpenError(MusicRemoteException):
    """
    Raised when a command is issued while the WebSocket is not open.

    Examples:
        >>> raise ConnectionNotOpenError("Not connected to voice channel")
    """
    pass

class SearchError(MusicRemoteException):
    """
    Raised when the search proxy fails. The message is shown to the user as is.

    Examples:
        >>> raise SearchError("Search failed", code=502)
    """
    pass

class ConfigError(MusicRemoteException):
    pass
