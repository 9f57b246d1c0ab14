"""
Domain Layer - Pure Business Logic

This layer contains:
- Entities: Sale aggregate, sale items and reference data
- Value Objects: Money
- Services: Pricing policy for quantity discounts

No external dependencies allowed in this layer.
"""
