"""Pure helpers for URI and literal handling."""
