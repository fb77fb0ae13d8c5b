"""HTTP API for the weight loss challenge."""
