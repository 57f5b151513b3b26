"""
Application Layer

Contains application services that orchestrate domain objects and
infrastructure to fulfil bot commands.

Structure:
- services/: Playback controller, per-guild mailboxes, track lookup, status and idle eviction
- interfaces/: Port interfaces for infrastructure adapters
"""
