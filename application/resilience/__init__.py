from .retry import with_retry
from .debounce import Debouncer

__all__ = ["with_retry", "Debouncer"]
