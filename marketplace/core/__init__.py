"""Core building blocks shared across domains."""
