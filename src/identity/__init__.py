"""Identity bounded context: users, authentication, account status."""
