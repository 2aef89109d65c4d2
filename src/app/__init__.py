# =============================================================================
# Application Entry Points
# =============================================================================
# Thin Lambda adapters that run a business function between the event
# normalizer and the response encoder.
# =============================================================================

from src.app.function_handler import FunctionHandler, lambda_handler

__all__ = [
    "FunctionHandler",
    "lambda_handler",
]
