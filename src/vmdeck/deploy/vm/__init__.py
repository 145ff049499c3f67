"""VM handle and provisioning coordinator."""
