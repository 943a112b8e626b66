"""
Genesis backend

Handlers (leaf operations), services (composed operations) and the
install/launch orchestrator.
"""
