"""Employee service: doctors, team managers and top managers."""
