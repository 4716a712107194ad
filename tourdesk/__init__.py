"""Tour booking backend with PayHere checkout and payment notifications."""

__version__ = "1.0.0"
