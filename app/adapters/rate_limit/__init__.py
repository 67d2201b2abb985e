"""Rate limiting adapters.

Limiters derive their decision from state owned by the store, so any number of
API instances enforce one shared budget per user.
"""
