"""Desktop app and command line for the sema indicator."""
