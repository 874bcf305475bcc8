"""Labeled logging setup and structured error log buffering."""
