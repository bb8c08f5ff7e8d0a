"""HTTP surface of roomboard."""
