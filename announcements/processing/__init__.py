"""Normalization, batch scoring and merging of announcement records."""
