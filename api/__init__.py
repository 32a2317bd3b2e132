"""
api/ - External Services
========================
Clients for the HTTP APIs the bot depends on.
"""
