"""Static lookup tables."""
