"""Persistence-first operations: write through the store, then hand off to the dispatcher."""
