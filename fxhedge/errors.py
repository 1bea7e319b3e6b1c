# errors.py
# ------------------------------------------------------------
# Exceptions raised at the boundary of the hedging engine.
# Ordinary conditions (barrier not breached, no convergence) are
# never reported through exceptions.
# ------------------------------------------------------------


class InvalidLegError(ValueError):
    """A leg record cannot be turned into a strategy leg."""


class InvalidParameterError(ValueError):
    """A market or run parameter is outside its valid domain."""
