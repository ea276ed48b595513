# Copyright (c) Syntropy Systems
"""forage command line interface."""
