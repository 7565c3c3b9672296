# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for everything. This file should contain only safe overrides.
"""

# Example: talk to a staging server
# API_BASE_URL = "https://staging.example.com/api"

# Example: chattier console
# LOG_LEVEL = "DEBUG"
