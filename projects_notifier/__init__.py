"""Projects Notifier - freelance project listings to your inbox."""

__version__ = "0.1.0"
