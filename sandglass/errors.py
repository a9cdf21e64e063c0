"""
Exceptions raised by the Sandglass valuation engine.
"""


class SandglassError(Exception):
    """Base class for all Sandglass monitor errors."""
    pass


class InvalidMarketConfigError(SandglassError, ValueError):
    """
    Market snapshot cannot be valued.

    Raised for a zero price base, an empty market window, an LP supply of
    zero against a non-empty pool, or an unknown market type. Valuing such a
    market would divide by zero, so the market fails as a whole instead of
    producing a partial price.
    """

    def __init__(self, message: str, market_id: str = None):
        self.market_id = market_id
        if market_id:
            message = f"[{market_id}] {message}"
        super().__init__(message)
