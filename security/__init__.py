"""
security/ - Access Control
==========================
Allow-listing, the admin check and per-user rate limiting.
"""
