"""TradeConnect Application Package - conference and event management API.

Invariants:
    - Package root holds metadata only (import side-effects prohibited)
"""

__version__ = "1.0.0"
