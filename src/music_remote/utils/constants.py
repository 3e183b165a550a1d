# Connection
WS_PATH = "/api/ws"
RECONNECT_DELAY = 5.0  # seconds, fixed, retried forever
ABNORMAL_CLOSE_CODE = 1006

# Progress extrapolation
TICK_INTERVAL = 1.0  # seconds
TICK_QUANTUM_MS = 1000

# Search proxy
PROXY_PATH = "/api/proxy"
SEARCH_PATH = "/api/search"
SEARCH_TIMEOUT = 15  # seconds

# Notification icons, by severity
ICONS = {
    'SUCCESS': "✅",
    'INFO': "ℹ️",
    'WARNING': "⚠️",
    'ERROR': "❌"
}

# User-facing messages
MESSAGES = {
    'COMMAND_SENT_TITLE': "Command Sent",
    'COMMAND_SENT': "Sent {} command",
    'NOT_CONNECTED_TITLE': "Error",
    'NOT_CONNECTED': "Not connected to voice channel",
    'DISCONNECTED_TITLE': "Disconnected",
    'DISCONNECTED': "Lost connection to the music bot. Attempting to reconnect... (Code: {})",
    'RECONNECTING_TITLE': "Reconnecting",
    'RECONNECTING': "Reconnecting to the music bot...",
    'WS_ERROR_TITLE': "WebSocket Error",
    'WS_ERROR': "An error occurred with the WebSocket connection. Attempting to reconnect...",
    'SEARCH_ERROR_TITLE': "Search Error",
    'SEARCH_FAILED': "Search failed",
    'SEARCH_FALLBACK': "Failed to perform search. Please try again.",
    'LOGIN_REQUIRED': "Please login to control the music bot.",
    'NOTHING_PLAYING': "No track currently playing",
    'QUEUE_EMPTY': "The queue is empty.",
    'NO_LYRICS': "No lyrics available for this track.",
}
