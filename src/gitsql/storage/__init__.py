"""Engine sessions backed by apsw."""
