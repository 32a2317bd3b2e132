"""
utils/ - Shared Utilities
=========================
Logging, the error taxonomy, input validators and the asyncio RW lock.
Imported by every other layer; depends only on config.
"""
