"""Credential hub API: server-held navigation, demo sessions and wallet credentials."""
