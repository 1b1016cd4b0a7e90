from enum import Enum


class Currency(str, Enum):
    CLP = "CLP"
    USD = "USD"
    EUR = "EUR"
    COP = "COP"


# Upper bound accepted for any monetary amount
MAX_AMOUNT = "999999999.99"

# Chilean IVA, used when no rate is configured or given
IVA_RATE = "0.19"
