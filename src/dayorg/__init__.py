"""dayorg - Day Organizer task planning client."""

__version__ = "0.1.0"
