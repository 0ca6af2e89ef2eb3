"""statsprobe test suites."""
