# The SACCO year runs as three four-month quarters
QUARTERS_PER_YEAR = 3
MONTHS_PER_QUARTER = 4

# Range accepted when an admin creates a quarter
MIN_QUARTER_YEAR = 2020
MAX_QUARTER_YEAR = 2050

QUARTER_STATUS_CHOICES = [
    ("upcoming", "Upcoming"),
    ("active", "Active"),
    ("completed", "Completed"),
    ("inactive", "Inactive"),
    ("shareout", "Share-out"),
]
