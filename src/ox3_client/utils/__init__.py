"""Helpers shared by the handshake and the request gateway."""
