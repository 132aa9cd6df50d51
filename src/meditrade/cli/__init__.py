"""Command-line client for the MediTrade API."""
