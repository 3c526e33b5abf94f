"""Parcel tracking — package lifecycle and access-control engine."""
