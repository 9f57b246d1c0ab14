"""
Application Layer - Use cases and collaborator contracts

Coordinates the domain model with persistence and event publishing through
interfaces that the infrastructure layer implements.
"""
