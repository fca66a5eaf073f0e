"""Database connectors for the query pipeline."""
