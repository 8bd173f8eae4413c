"""Results service: examination results of clients."""
