"""Intent and hook pattern classification."""
