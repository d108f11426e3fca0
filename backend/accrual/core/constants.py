# Rates and accrual factors are fixed point with 18 decimals.
PRECISION = 10**18

# Passing this as an amount means "the full live balance".
MAX_AMOUNT = 2**256 - 1
