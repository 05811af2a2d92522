"""Example usage of promptcraft."""
