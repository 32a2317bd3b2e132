"""
services/ - Business Logic Layer
=================================
Services orchestrate repositories and the Monitoring API client.
Handlers call services; services never talk to Telegram.
"""
