"""Patient and examination record files: blocked sequential storage, a hashed summary file, an access log and an interactive menu."""

__version__ = "0.1.0"