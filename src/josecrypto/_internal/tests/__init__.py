"""josecrypto tests."""
