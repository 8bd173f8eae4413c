"""Registration service: the duty catalog and client registrations."""
