"""Atomic components: one concern per package, pure functions over ports."""
