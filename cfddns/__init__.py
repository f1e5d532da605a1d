"""Dynamic DNS client keeping Cloudflare A/AAAA records in sync with the public IP."""

__version__ = "0.1.0"
__all__ = ["cloudflare", "config", "main", "real_ip"]