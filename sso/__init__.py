"""Single sign-on RPC service."""

__version__ = "1.0.0"
