"""Share-price trend card: acquisition, fallback and curve geometry."""
