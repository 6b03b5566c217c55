"""Concrete adapters: the artist-weight cache and the CSV record sink."""
