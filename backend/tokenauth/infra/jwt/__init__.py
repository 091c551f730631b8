"""PyJWT credential generator."""
