"""Services Layer - transactional use cases over the ORM.

Invariants:
    - One service class per aggregate, constructed with an AsyncSession
    - Services raise TradeConnectError subclasses, never HTTP exceptions
    - Every mutating operation writes an audit record in the same transaction
"""
