"""Layered rule sets: data model, store, normalizer, merge and loading."""
