"""Provider clients used by the firewall."""
