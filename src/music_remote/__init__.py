"""Remote control and playback-state synchronizer for a voice-channel music bot."""

__version__ = "0.1.0"
