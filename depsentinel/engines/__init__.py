"""Detection engines."""
