"""
Two-step login for Django: staged credentials, one-time codes and
remembered devices.
"""
