"""Pet Butler Web - HTTP entry points."""
