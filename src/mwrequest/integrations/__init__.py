"""Transports backed by third-party HTTP clients."""
