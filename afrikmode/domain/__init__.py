"""Domain: exceptions shared by infrastructure and the API layer."""
