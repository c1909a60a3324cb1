"""Shared configuration, runtime and I/O helpers."""
