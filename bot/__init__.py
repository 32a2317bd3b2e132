"""
bot/ - Dispatch Core
====================
Turns raw Telegram updates into authorized handler calls:
UpdateDispatcher -> CommandRouter -> handler, plus the typed callback
payload codec and the outgoing chat transport.
"""
