"""Infrastructure adapters: settings, filesystem I/O and logging."""
