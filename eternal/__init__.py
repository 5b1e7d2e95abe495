"""Per-user service supervisor: a daemon that runs services and a client to control it."""

__version__ = "0.1.0"