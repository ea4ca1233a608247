#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import random


def fake_phone_number(rng: random.Random | None = None) -> str:
    """Generates a fake US phone number, eg (555) 123-4567."""
    rng = rng or random.Random()
    line = "".join(str(rng.randint(0, 9)) for _ in range(4))
    exchange = "".join(str(rng.randint(0, 9)) for _ in range(3))
    return f"(555) {exchange}-{line}"


def fake_email_address(name: str, domain: str = "brainrx.com") -> str:
    """Generates a fake email address from a full name."""
    return f"{'.'.join(name.split())}@{domain}".lower()


def random_dates(
    start_date: datetime.date,
    end_date: datetime.date,
    n: int,
    rng: random.Random | None = None,
) -> list[datetime.date]:
    """Generate a list of random dates within a given interval.

    Parameters
    ----------
    n
        The number of random dates to generate
    """
    rng = rng or random.Random()
    delta = end_date - start_date
    return [
        start_date + datetime.timedelta(days=rng.randint(0, delta.days))
        for _ in range(n)
    ]
