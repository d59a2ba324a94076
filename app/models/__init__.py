from .record import KVRecord

__all__ = [
    "KVRecord",
]
