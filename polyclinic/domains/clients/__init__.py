"""Client service: patients of the clinic."""
