"""Core pixel containers and algorithms for OpenBitmap."""
