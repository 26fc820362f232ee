"""HTTP-facing pieces: request body decoding and the Response type."""
