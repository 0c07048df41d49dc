"""RetroVault: a personal retro game collection tracker API."""
