"""Loaders for dictionaries, HMM tables and the compiled cache."""
