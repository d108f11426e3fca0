from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class BigUint(TypeDecorator):
    """Unsigned integer of up to 256 bits, stored as decimal text.

    Numeric columns lose precision past 64 bits on SQLite, and balances scaled
    by 1e18 overflow that quickly.
    """

    impl = String(78)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        v = int(value)
        if v < 0:
            raise ValueError("BigUint cannot store a negative value")
        return str(v)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)
