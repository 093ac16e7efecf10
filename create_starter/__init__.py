"""create-starter: assemble a full-stack project from a starter repository."""

__version__ = "0.1.0"
