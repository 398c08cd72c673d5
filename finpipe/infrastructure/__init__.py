"""Infrastructure adapters: database, record store and e-mail delivery."""
