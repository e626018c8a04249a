"""Click sub-commands registered on the root ``cli`` group in main.py."""
