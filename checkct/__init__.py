"""Create constant-time verification workspaces for cargo crates and check them with binsec."""

__version__ = "0.1.0"