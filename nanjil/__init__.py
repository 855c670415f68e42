"""Nanjil MEP Services backend."""
