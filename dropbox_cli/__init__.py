"""Command line client for Dropbox files, folders, shared links and Paper documents."""

__version__ = "0.1.0"
