"""Identity and token lifecycle service for the Homie marketplace."""

__version__ = "0.1.0"
