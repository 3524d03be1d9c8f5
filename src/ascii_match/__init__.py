"""ascii-match: pick one ASCII-art file that matches a free-text query."""

__version__ = "0.1.0"
