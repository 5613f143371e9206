"""
Location-aware chat.

Holds the conversation state, the location and input components, the
message renderer and the HTTP router that exposes them.
"""
