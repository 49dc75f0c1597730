"""Hand detection and landmark feature extraction."""
