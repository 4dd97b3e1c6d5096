"""Quota state storage adapters.

The ledger talks to an abstract store so the in-process implementation can be
swapped for a shared backend without touching the rate limiting algorithms.
"""
