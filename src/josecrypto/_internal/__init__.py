"""Internal implementation details of josecrypto."""
