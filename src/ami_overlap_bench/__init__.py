"""Overlapped-speech DER benchmark over AMI meeting word annotations."""

__version__ = "0.1.0"
