"""Small hashing and byte helpers used across the series-mint package."""
