"""Identity service: user records over HTTP backed by a relational store."""

__all__ = []
