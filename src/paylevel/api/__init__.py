"""HTTP API over the PayLevel engine."""
