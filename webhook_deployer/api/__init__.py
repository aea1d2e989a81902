"""HTTP routes for Webhook Deployer."""
