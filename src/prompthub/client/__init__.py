"""Client side of prompthub sync: secrets, providers, local stores and CLI."""
