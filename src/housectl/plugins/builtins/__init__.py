"""Built-in plugins shipped with housectl."""
