"""Creator content monetization backend."""
