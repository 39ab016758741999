"""Date manipulation utilities"""

import random
from datetime import date, timedelta


def random_past_date(rng: random.Random, reference: date, min_days: int, max_days: int) -> date:
    """Date between min_days and max_days (inclusive) before reference"""
    return reference - timedelta(days=rng.randint(min_days, max_days))
