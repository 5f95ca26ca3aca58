"""Back up and remove large local copies of remote-synced files."""

__version__ = "0.1.0"
