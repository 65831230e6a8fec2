"""Event-sourced consistency core for credit lines and billing cycles."""

__version__ = "0.1.0"
