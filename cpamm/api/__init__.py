"""HTTP surface over the pool registry."""
