"""
handlers/ - Presentation Layer
================================
Command and callback handlers. Each handler group receives a RequestContext,
delegates to the appropriate Service, and replies through the context.
No business logic lives here.
"""
