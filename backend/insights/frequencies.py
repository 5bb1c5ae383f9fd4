"""Conversions between recurrence frequencies and monthly/annual amounts."""

# Average occurrences per month for sub-monthly frequencies
MONTHLY_MULTIPLIERS = {
    "weekly": 4.33,
    "biweekly": 2.17,
    "monthly": 1.0,
}

# Months covered by one occurrence for longer frequencies
MONTHLY_DIVISORS = {
    "quarterly": 3,
    "yearly": 12,
}

ANNUAL_FACTORS = {
    "weekly": 52,
    "biweekly": 26,
    "monthly": 12,
    "quarterly": 4,
    "yearly": 1,
}


def normalize_frequency(frequency: str) -> str:
    """Canonical lowercase frequency name; empty when missing."""
    return (frequency or "").strip().lower()


def monthly_equivalent(amount: float, frequency: str) -> float:
    """Amount per month; unknown frequencies count as monthly."""
    frequency = normalize_frequency(frequency)
    if frequency in MONTHLY_DIVISORS:
        return amount / MONTHLY_DIVISORS[frequency]
    return amount * MONTHLY_MULTIPLIERS.get(frequency, 1.0)


def annual_cost(amount: float, frequency: str) -> float:
    """Amount per year; unknown frequencies count as monthly."""
    return amount * ANNUAL_FACTORS.get(normalize_frequency(frequency), 12)
