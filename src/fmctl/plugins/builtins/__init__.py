"""Built-in plugins shipped with fmctl."""
