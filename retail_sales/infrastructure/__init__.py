"""
Infrastructure Layer - PostgreSQL persistence, event delivery, configuration and logging
"""
