"""Sample resources that exercise the harness end to end."""
