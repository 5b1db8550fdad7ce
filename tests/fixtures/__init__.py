"""Test doubles for the cluster side of the pod lifecycle."""
