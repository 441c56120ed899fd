"""Datastore contract, in-memory implementation, and typed repository."""
